"""Tagged call results: every SDK call returns ``Ok`` or ``Err``, never raises."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar, Union

import httpx

T = TypeVar("T")


@dataclass(frozen=True)
class BackendError:
    """A failed call: an RFC 7807 problem document, or a transport failure.

    Transport failures carry no ``status``.
    """

    message: str
    status: Optional[int] = None
    type: Optional[str] = None
    title: Optional[str] = None
    errors: dict[str, Any] = field(default_factory=dict)

    @property
    def is_transport(self) -> bool:
        return self.status is None

    @classmethod
    def from_response(cls, response: httpx.Response) -> BackendError:
        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            return cls(
                message=response.text or response.reason_phrase,
                status=response.status_code,
            )
        return cls(
            message=str(body.get("detail") or body.get("error") or body.get("title") or response.reason_phrase),
            status=response.status_code,
            type=body.get("type"),
            title=body.get("title"),
            errors=body.get("errors") or {},
        )

    @classmethod
    def from_exception(cls, exc: Exception) -> BackendError:
        return cls(message=f"{type(exc).__name__}: {exc}")

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"{self.status}: {self.message}"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: BackendError

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]
