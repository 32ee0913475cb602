"""Result type used by use cases

Use cases return ``Result`` instead of raising for business outcomes.
Callers check ``is_ok()`` / ``is_err()`` and read ``value`` or ``error``.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Error:
    """Business error carried by a failed Result"""

    code: str
    message: str
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"code": self.code, "message": self.message}
        if self.reason:
            data["reason"] = self.reason
        return data


class Result(Generic[T]):
    """Outcome of a use case: either a value or an Error"""

    __slots__ = ("_value", "_error")

    def __init__(self, value: Optional[T] = None, error: Optional[Error] = None):
        self._value = value
        self._error = error

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    @property
    def value(self) -> T:
        if self._error is not None:
            raise ValueError(f"Result is an error: {self._error.code}")
        return self._value

    @property
    def error(self) -> Error:
        if self._error is None:
            raise ValueError("Result is not an error")
        return self._error

    def __repr__(self) -> str:
        if self.is_ok():
            return f"Result.ok({self._value!r})"
        return f"Result.err({self._error!r})"


class Return:
    """Factory helpers for Result"""

    @staticmethod
    def ok(value: T = None) -> Result[T]:
        return Result(value=value)

    @staticmethod
    def err(error: Error) -> Result:
        return Result(error=error)
