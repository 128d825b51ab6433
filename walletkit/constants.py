"""Network registry and protocol constants for walletkit."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

__all__ = [
    "CoinType",
    "Network",
    "NetworkParams",
    "NETWORK_PARAMS",
    "Coin",
    "AddressType",
    "API_ENDPOINTS",
    "DEFAULT_TIMEOUT",
    "USER_AGENT",
    "SECP256K1_N",
    "HARDENED_OFFSET",
    "TESTNET_COIN_INDEX",
    "MAX_BLOCK_SIZE",
    "MAX_SCRIPT_SIZE",
    "DEFAULT_SEQUENCE",
    "TRANSACTION_VERSION",
    "ERC20_TRANSFER_SELECTOR",
]

# secp256k1 curve order
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

HARDENED_OFFSET = 0x80000000

# BIP44: every testnet shares coin type 1
TESTNET_COIN_INDEX = 1

MAX_BLOCK_SIZE = 1_000_000
MAX_SCRIPT_SIZE = 10_000
DEFAULT_SEQUENCE = 0xFFFFFFFF
TRANSACTION_VERSION = 2

# keccak256("transfer(address,uint256)")[:4]
ERC20_TRANSFER_SELECTOR = bytes.fromhex("a9059cbb")

DEFAULT_TIMEOUT = 30
USER_AGENT = "walletkit/1.0.0"


class CoinType(str, Enum):
    """Chain family a network or coin belongs to."""
    BTC = "BTC"
    LTC = "LTC"
    ETH = "ETH"


class Network(str, Enum):
    """A (coin type, mainnet | testnet) pair."""
    BTC_MAINNET = "btc-mainnet"
    BTC_TESTNET = "btc-testnet"
    LTC_MAINNET = "ltc-mainnet"
    LTC_TESTNET = "ltc-testnet"
    ETH_MAINNET = "eth-mainnet"
    ETH_TESTNET = "eth-testnet"

    @property
    def params(self) -> "NetworkParams":
        """Protocol constants for this network."""
        return NETWORK_PARAMS[self]

    @property
    def coin_type(self) -> CoinType:
        return self.params.coin_type

    def is_mainnet(self) -> bool:
        return self.params.mainnet


@dataclass(frozen=True)
class NetworkParams:
    """Immutable protocol constants of a single network."""

    coin_type: CoinType
    mainnet: bool
    coin_index: int
    p2pkh_version: int
    p2sh_version: int
    wif_version: int
    bech32_hrp: str
    p2pkh_xpub: int
    p2pkh_xprv: int
    p2wpkh_xpub: int
    p2wpkh_xprv: int
    max_money: Optional[int] = None
    chain_id: Optional[int] = None

    @property
    def bip44_coin_index(self) -> int:
        """Coin type segment used in derivation paths."""
        return self.coin_index if self.mainnet else TESTNET_COIN_INDEX

    @property
    def public_headers(self) -> tuple[int, int]:
        return (self.p2pkh_xpub, self.p2wpkh_xpub)

    @property
    def private_headers(self) -> tuple[int, int]:
        return (self.p2pkh_xprv, self.p2wpkh_xprv)


_BTC_MAX_MONEY = 21_000_000 * 100_000_000
_LTC_MAX_MONEY = 84_000_000 * 100_000_000

NETWORK_PARAMS: Mapping[Network, NetworkParams] = MappingProxyType({
    Network.BTC_MAINNET: NetworkParams(
        coin_type=CoinType.BTC,
        mainnet=True,
        coin_index=0,
        p2pkh_version=0x00,
        p2sh_version=0x05,
        wif_version=0x80,
        bech32_hrp="bc",
        p2pkh_xpub=0x0488B21E,
        p2pkh_xprv=0x0488ADE4,
        p2wpkh_xpub=0x04B24746,
        p2wpkh_xprv=0x04B2430C,
        max_money=_BTC_MAX_MONEY,
    ),
    Network.BTC_TESTNET: NetworkParams(
        coin_type=CoinType.BTC,
        mainnet=False,
        coin_index=0,
        p2pkh_version=0x6F,
        p2sh_version=0xC4,
        wif_version=0xEF,
        bech32_hrp="tb",
        p2pkh_xpub=0x043587CF,
        p2pkh_xprv=0x04358394,
        p2wpkh_xpub=0x045F1CF6,
        p2wpkh_xprv=0x045F18BC,
        max_money=_BTC_MAX_MONEY,
    ),
    Network.LTC_MAINNET: NetworkParams(
        coin_type=CoinType.LTC,
        mainnet=True,
        coin_index=2,
        p2pkh_version=0x30,
        p2sh_version=0x32,
        wif_version=0xB0,
        bech32_hrp="ltc",
        p2pkh_xpub=0x0488B21E,
        p2pkh_xprv=0x0488ADE4,
        p2wpkh_xpub=0x04B24746,
        p2wpkh_xprv=0x04B2430C,
        max_money=_LTC_MAX_MONEY,
    ),
    Network.LTC_TESTNET: NetworkParams(
        coin_type=CoinType.LTC,
        mainnet=False,
        coin_index=2,
        p2pkh_version=0x6F,
        p2sh_version=0x3A,
        wif_version=0xEF,
        bech32_hrp="tltc",
        p2pkh_xpub=0x043587CF,
        p2pkh_xprv=0x04358394,
        p2wpkh_xpub=0x045F1CF6,
        p2wpkh_xprv=0x045F18BC,
        max_money=_LTC_MAX_MONEY,
    ),
    Network.ETH_MAINNET: NetworkParams(
        coin_type=CoinType.ETH,
        mainnet=True,
        coin_index=60,
        p2pkh_version=0x00,
        p2sh_version=0x05,
        wif_version=0x80,
        bech32_hrp="bc",
        p2pkh_xpub=0x0488B21E,
        p2pkh_xprv=0x0488ADE4,
        p2wpkh_xpub=0x04B24746,
        p2wpkh_xprv=0x04B2430C,
        chain_id=1,
    ),
    Network.ETH_TESTNET: NetworkParams(
        coin_type=CoinType.ETH,
        mainnet=False,
        coin_index=60,
        p2pkh_version=0x6F,
        p2sh_version=0xC4,
        wif_version=0xEF,
        bech32_hrp="tb",
        p2pkh_xpub=0x043587CF,
        p2pkh_xprv=0x04358394,
        p2wpkh_xpub=0x045F1CF6,
        p2wpkh_xprv=0x045F18BC,
        chain_id=3,
    ),
})


class Coin(Enum):
    """
    Transferable units.

    Each value is ``(code, coin_type, scale, contract_address)``; the
    contract address is set only for ERC-20 tokens.
    """
    BTC = ("BTC", CoinType.BTC, 8, None)
    LTC = ("LTC", CoinType.LTC, 8, None)
    ETH = ("ETH", CoinType.ETH, 18, None)
    USDT = ("USDT", CoinType.ETH, 6, "0xdAC17F958D2ee523a2206206994597C13D831ec7")
    USDC = ("USDC", CoinType.ETH, 6, "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48")
    WBTC = ("WBTC", CoinType.ETH, 8, "0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599")
    DAI = ("DAI", CoinType.ETH, 18, "0x6B175474E89094C44Da98b954EedeAC495271d0F")

    def __init__(
        self,
        code: str,
        coin_type: CoinType,
        scale: int,
        contract_address: Optional[str],
    ) -> None:
        self.code = code
        self.coin_type = coin_type
        self.scale = scale
        self.contract_address = contract_address

    @property
    def min_value(self) -> Decimal:
        """Smallest transferable amount, e.g. 0.00000001 for BTC."""
        return Decimal(1).scaleb(-self.scale)

    @property
    def is_token(self) -> bool:
        return self.contract_address is not None


class AddressType(Enum):
    """
    Address flavours and their BIP43 purpose.

    A negative purpose marks a type that cannot be HD-derived.
    """
    P2PKH_LEGACY = 44
    P2WPKH_NATIVE_SEGWIT = 84
    # Encoded and signed as P2WPKH
    P2TR_TAPROOT = 86
    P2SH_PAY_TO_SCRIPT_HASH = -1

    @property
    def purpose(self) -> int:
        return self.value

    @property
    def is_hd_compatible(self) -> bool:
        return self.purpose >= 0


API_ENDPOINTS: Mapping[Network, str] = MappingProxyType({
    Network.BTC_MAINNET: "https://mempool.space/api",
    Network.BTC_TESTNET: "https://mempool.space/testnet/api",
    Network.LTC_MAINNET: "https://litecoinspace.org/api",
    Network.LTC_TESTNET: "https://litecoinspace.org/testnet/api",
})
