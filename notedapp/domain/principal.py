"""Principal value object and its textual encoding.

The textual form is lowercase base32 (RFC 4648 alphabet, no padding) of a
big-endian CRC32 checksum followed by the raw bytes, split into groups of
five characters joined by dashes, e.g. ``2vxsx-fae`` for the anonymous
principal.
"""

from __future__ import annotations

import base64
import zlib
from dataclasses import dataclass

_MAX_RAW_LEN = 29
_CHECKSUM_LEN = 4
_GROUP = 5
_ANONYMOUS_RAW = b"\x04"


@dataclass(frozen=True)
class Principal:
    """Stable identifier of a user or service in the backend's auth model."""

    raw: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.raw, (bytes, bytearray)):
            raise TypeError("Principal requires raw bytes.")
        if len(self.raw) > _MAX_RAW_LEN:
            raise ValueError(f"Principal is longer than {_MAX_RAW_LEN} bytes.")
        object.__setattr__(self, "raw", bytes(self.raw))

    @classmethod
    def anonymous(cls) -> "Principal":
        return cls(_ANONYMOUS_RAW)

    @classmethod
    def from_text(cls, text: str) -> "Principal":
        """Parse the canonical textual encoding.

        Raises:
            ValueError: If ``text`` is not a canonical principal encoding.
        """
        if not isinstance(text, str):
            raise ValueError("Principal text must be a string.")
        normalized = text.strip().lower()
        if not normalized:
            raise ValueError("Principal text is empty.")

        compact = normalized.replace("-", "").upper()
        padding = "=" * (-len(compact) % 8)
        try:
            decoded = base64.b32decode(compact + padding)
        except ValueError as exc:
            raise ValueError(f"Invalid principal encoding: {text!r}") from exc

        if len(decoded) < _CHECKSUM_LEN:
            raise ValueError(f"Principal text is too short: {text!r}")
        checksum, raw = decoded[:_CHECKSUM_LEN], decoded[_CHECKSUM_LEN:]
        if len(raw) > _MAX_RAW_LEN:
            raise ValueError(f"Principal is longer than {_MAX_RAW_LEN} bytes.")
        if checksum != _crc32(raw):
            raise ValueError(f"Principal checksum mismatch: {text!r}")

        principal = cls(raw)
        if principal.to_text() != normalized:
            raise ValueError(f"Principal text is not canonical: {text!r}")
        return principal

    @classmethod
    def is_valid_text(cls, text: str) -> bool:
        try:
            cls.from_text(text)
        except ValueError:
            return False
        return True

    @property
    def is_anonymous(self) -> bool:
        return self.raw == _ANONYMOUS_RAW

    def to_text(self) -> str:
        encoded = base64.b32encode(_crc32(self.raw) + self.raw).decode("ascii")
        encoded = encoded.rstrip("=").lower()
        groups = [encoded[i : i + _GROUP] for i in range(0, len(encoded), _GROUP)]
        return "-".join(groups)

    def __str__(self) -> str:
        return self.to_text()


def _crc32(data: bytes) -> bytes:
    return (zlib.crc32(data) & 0xFFFFFFFF).to_bytes(_CHECKSUM_LEN, "big")


__all__ = ["Principal"]
