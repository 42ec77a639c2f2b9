"""Discriminated result type for tagged backend replies.

The backend answers fallible calls with either a bare value or a single-key
wrapper ``{"Ok": value}`` / ``{"Err": error}``. ``from_wire`` turns those
shapes into ``Ok`` or ``Err`` once, at the adapter boundary, so nothing above
it inspects dictionary keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

_OK = "Ok"
_ERR = "Err"
UNKNOWN_TAG = "Unknown"


@dataclass(frozen=True)
class RemoteError:
    """One variant of a backend error enum, e.g. ``InsufficientFunds``."""

    tag: str
    payload: Any = None

    @classmethod
    def from_wire(cls, payload: Any) -> "RemoteError":
        if isinstance(payload, str):
            return cls(tag=payload.strip() or UNKNOWN_TAG)
        if isinstance(payload, Mapping) and len(payload) == 1:
            (tag, value), = payload.items()
            return cls(tag=str(tag), payload=value)
        return cls(tag=UNKNOWN_TAG, payload=payload)

    @property
    def message(self) -> str:
        if isinstance(self.payload, Mapping):
            text = self.payload.get("message")
            if isinstance(text, str) and text.strip():
                return text.strip()
        if isinstance(self.payload, str) and self.payload.strip():
            return self.payload.strip()
        return self.tag


@dataclass(frozen=True)
class Ok:
    value: Any = None


@dataclass(frozen=True)
class Err:
    error: RemoteError


TaggedResult = Union[Ok, Err]


def from_wire(payload: Any) -> TaggedResult:
    """Normalize a reply into ``Ok``/``Err``.

    A void reply (``None``) and any value that is not a tagged wrapper count
    as a bare success value.
    """
    if isinstance(payload, Mapping):
        has_ok = _OK in payload
        has_err = _ERR in payload
        if has_ok and has_err:
            raise ValueError("Tagged result carries both Ok and Err.")
        if has_ok and len(payload) == 1:
            return Ok(payload[_OK])
        if has_err and len(payload) == 1:
            return Err(RemoteError.from_wire(payload[_ERR]))
    return Ok(payload)


def is_ok(result: TaggedResult) -> bool:
    return isinstance(result, Ok)


def ok_or_none(result: TaggedResult) -> Optional[Any]:
    """Fold a speculative read into an optional value.

    The ``Err`` case is discarded on purpose: for best-effort reads the
    absence of a value is the state callers act on.
    """
    if isinstance(result, Ok):
        return result.value
    return None


__all__ = [
    "Err",
    "Ok",
    "RemoteError",
    "TaggedResult",
    "UNKNOWN_TAG",
    "from_wire",
    "is_ok",
    "ok_or_none",
]
