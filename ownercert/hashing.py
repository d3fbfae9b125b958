"""
Ownership Certificate Hashing

Checksum Function and Digest interface.

The default digest is a rolling multiply-add hash over UTF-16 code units,
wrapped to a signed 32-bit integer, absolute value taken, rendered in
base 36. It is NOT collision resistant and NOT a MAC: it detects
corruption and casual tampering only. Its exact output must be preserved
for every identifier already issued.

KeyedBlake2bDigest is an opt-in replacement backed by PyNaCl. Identifiers
issued with it do not verify under the default digest and vice versa.
"""

import base64
import struct
from abc import ABC, abstractmethod
from typing import Iterable, Tuple, Union

from nacl.encoding import RawEncoder
from nacl.hash import blake2b

BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"

CONTENT_HASH_LENGTH = 6

_INT32_MASK = 0xFFFFFFFF
_INT32_SIGN = 0x80000000


def to_int32(value: int) -> int:
    """Wrap an integer to a signed 32-bit value."""
    value &= _INT32_MASK
    return value - 0x100000000 if value & _INT32_SIGN else value


def utf16_code_units(text: str) -> Tuple[int, ...]:
    """Return the UTF-16 code units of text (surrogate pairs split)."""
    data = text.encode("utf-16-le", "surrogatepass")
    return struct.unpack(f"<{len(data) // 2}H", data)


def reverse_utf16(text: str) -> str:
    """
    Reverse text by UTF-16 code unit.

    Astral characters end up with their surrogates swapped, matching how
    the signature input has always been reversed.
    """
    units = utf16_code_units(text)[::-1]
    data = struct.pack(f"<{len(units)}H", *units)
    return data.decode("utf-16-le", "surrogatepass")


def to_base36(value: int) -> str:
    """Render a non-negative integer in lower-case base 36."""
    if value < 0:
        raise ValueError("base36 value must be non-negative")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(BASE36_ALPHABET[rem])
    return "".join(reversed(digits))


def from_base36(text: str) -> int:
    """
    Parse a lower-case base-36 string.

    Stricter than int(text, 36): no sign, whitespace or underscores.

    Raises:
        ValueError: if text is empty or contains a non base-36 character
    """
    if not text or any(c not in BASE36_ALPHABET for c in text):
        raise ValueError(f"not a base36 value: {text!r}")
    return int(text, 36)


def rolling_hash(units: Iterable[int]) -> int:
    """Compute the signed 32-bit rolling hash h = h * 31 + unit."""
    h = 0
    for unit in units:
        h = to_int32((h << 5) - h + unit)
    return h


def checksum(text: str) -> str:
    """
    Compute the base-36 checksum of text.

    Total and deterministic; at most 6 characters.
    """
    return to_base36(abs(rolling_hash(utf16_code_units(text))))


class Digest(ABC):
    """String digest used by the codec and the signature function."""

    @abstractmethod
    def digest(self, text: str) -> str:
        """Return a lower-case base-36 digest of text."""
        pass


class RollingChecksum(Digest):
    """The compatibility digest: checksum() behind the Digest interface."""

    def digest(self, text: str) -> str:
        return checksum(text)

    def __repr__(self) -> str:
        return "RollingChecksum()"


class KeyedBlake2bDigest(Digest):
    """
    Keyed BLAKE2b digest (PyNaCl), rendered in base 36.

    A real keyed MAC. Not compatible with identifiers issued under
    RollingChecksum.
    """

    def __init__(self, key: Union[bytes, str], digest_size: int = 16):
        if isinstance(key, str):
            key = key.encode("utf-8")
        if not key:
            raise ValueError("BLAKE2b key must not be empty")
        if len(key) > 64:
            key = blake2b(key, digest_size=32, encoder=RawEncoder)
        self._key = key
        self._digest_size = digest_size

    def digest(self, text: str) -> str:
        raw = blake2b(
            text.encode("utf-8"),
            digest_size=self._digest_size,
            key=self._key,
            encoder=RawEncoder,
        )
        return to_base36(int.from_bytes(raw, "big"))

    def __repr__(self) -> str:
        return f"KeyedBlake2bDigest(digest_size={self._digest_size})"


DEFAULT_DIGEST: Digest = RollingChecksum()


def content_hash(data: bytes, digest: Digest = DEFAULT_DIGEST) -> str:
    """
    Compute the content hash of an artifact's raw bytes.

    The digest runs over the base-64 text of the bytes and is truncated to
    CONTENT_HASH_LENGTH characters to keep identifiers URL-friendly.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    encoded = base64.b64encode(bytes(data)).decode("ascii")
    return digest.digest(encoded)[:CONTENT_HASH_LENGTH]


def verify_content_hash(declared_hash: str, data: bytes, digest: Digest = DEFAULT_DIGEST) -> bool:
    """Recompute the content hash of data and compare it to declared_hash."""
    return content_hash(data, digest) == declared_hash.lower()
