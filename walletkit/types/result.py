"""Tagged results returned by the public client."""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from ..exceptions import WalletError

__all__ = ["Ok", "Err", "Result"]

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying ``value``."""
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying the typed ``error``."""
    error: WalletError

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self):
        """Re-raise the carried error."""
        raise self.error


Result = Union[Ok[T], Err]
