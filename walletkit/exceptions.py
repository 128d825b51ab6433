"""walletkit exceptions hierarchy."""

from typing import Any, Optional

__all__ = [
    "WalletError",
    "ValidationError",
    "InvalidParameterError",
    "InvalidInputError",
    "InvalidMnemonicError",
    "InvalidAddressError",
    "InvalidPrivateKeyError",
    "InvalidAmountError",
    "UnsupportedError",
    "UnsupportedAddressTypeError",
    "UnsupportedNetworkError",
    "TransactionError",
    "UnsignableScriptError",
    "InsufficientFundsError",
    "ProviderError",
    "NetworkError",
    "APIError",
    "UpstreamResolutionError",
    "CryptoError",
    "SerializationError",
    "InternalValidationError",
]


class WalletError(Exception):
    """Base exception for all walletkit errors."""
    
    def __init__(
        self, 
        message: str, 
        code: Optional[int] = None, 
        data: Optional[Any] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data
        
    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class ValidationError(WalletError):
    """Raised when validation fails."""
    pass


class InvalidParameterError(ValidationError):
    """Raised when a caller parameter is outside its domain."""
    pass


class InvalidInputError(ValidationError):
    """Raised when a transaction input or receiver is rejected."""
    pass


class InvalidMnemonicError(InvalidInputError):
    """Raised when a mnemonic fails wordlist or checksum validation."""
    pass


class InvalidAddressError(InvalidInputError):
    """Raised when an address does not decode for the network."""
    pass


class InvalidPrivateKeyError(InvalidInputError):
    """Raised when a private key does not decode for the network."""
    pass


class InvalidAmountError(InvalidInputError):
    """Raised when an amount is below the coin minimum or has a bad scale."""
    pass


class UnsupportedError(WalletError):
    """Raised when a combination of arguments cannot be served."""
    pass


class UnsupportedAddressTypeError(UnsupportedError):
    """Raised when an address type cannot be used for the operation."""
    pass


class UnsupportedNetworkError(UnsupportedError):
    """Raised when a network or coin cannot be used for the operation."""
    pass


class TransactionError(WalletError):
    """Raised when transaction operation fails."""
    pass


class UnsignableScriptError(TransactionError):
    """Raised when a referenced output has no known signing template."""
    pass


class InsufficientFundsError(TransactionError):
    """Raised when outputs spend more than the inputs provide."""
    
    def __init__(
        self, 
        required: int, 
        available: int, 
        message: Optional[str] = None
    ) -> None:
        if message is None:
            message = f"Insufficient funds: required {required}, available {available} base units"
        super().__init__(message)
        self.required = required
        self.available = available


class ProviderError(WalletError):
    """Raised when provider encounters an error."""
    pass


class NetworkError(ProviderError):
    """Raised when network communication fails."""
    pass


class APIError(ProviderError):
    """Raised when API returns an error response."""
    pass


class UpstreamResolutionError(ProviderError):
    """Raised when a previous transaction cannot be resolved."""
    pass


class CryptoError(WalletError):
    """Raised when cryptographic operation fails."""
    pass


class SerializationError(WalletError):
    """Raised when serialization/deserialization fails."""
    pass


class InternalValidationError(WalletError):
    """Raised when a self-check on generated output fails."""
    pass
