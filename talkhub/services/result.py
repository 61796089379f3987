from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from talkhub.services.errors import GatewayDeliveryError

T = TypeVar("T")


@dataclass
class Result(Generic[T]):
    """Outcome of a gateway call; callers decide whether a failure is fatal."""

    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    status_code: Optional[int] = None

    @staticmethod
    def success(value: T, status_code: Optional[int] = None) -> "Result[T]":
        return Result(ok=True, value=value, status_code=status_code)

    @staticmethod
    def failure(error: str, code: str = "upstream_failure", status_code: Optional[int] = None) -> "Result[T]":
        return Result(ok=False, error=error, error_code=code, status_code=status_code)

    def unwrap(self) -> T:
        if not self.ok:
            raise GatewayDeliveryError(status_code=self.status_code)
        return self.value
