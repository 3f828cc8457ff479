"""
Passphrase handling for encrypted private keys

Python gives no guarantee that memory is wiped once an object is collected,
so this module keeps passphrase bytes in mutable buffers and overwrites them
explicitly (best effort) instead of passing plain strings around.
"""

import hashlib
from contextlib import contextmanager
from typing import Iterator, Optional, Union

from ..exceptions import ConfigurationError


def zero_buffer(buffer: bytearray) -> None:
    """Overwrite a mutable buffer with zeros in place."""
    for i in range(len(buffer)):
        buffer[i] = 0


class Passphrase:
    """
    Write-once secret holding a key passphrase.

    The value is stored in a private bytearray and only handed out through
    :meth:`reveal`, whose scratch copy is zeroed when the ``with`` block exits.
    """

    __slots__ = ('_buffer', '_fingerprint')

    def __init__(self, value: Union[str, bytes, bytearray]):
        if isinstance(value, str):
            value = value.encode('utf-8')
        if not isinstance(value, (bytes, bytearray)):
            raise ConfigurationError(
                "Passphrase must be str or bytes",
                "INVALID_PASSPHRASE",
                {"type": type(value).__name__}
            )
        self._buffer = bytearray(value)
        self._fingerprint = hashlib.sha256(self._buffer).hexdigest()

    @contextmanager
    def reveal(self) -> Iterator[bytearray]:
        """
        Yield a scratch copy of the passphrase bytes.

        The copy is zeroed on exit, including when the body raises.
        """
        if self._buffer is None:
            raise ConfigurationError("Passphrase has been cleared", "PASSPHRASE_CLEARED")
        scratch = bytearray(self._buffer)
        try:
            yield scratch
        finally:
            zero_buffer(scratch)

    def fingerprint(self) -> str:
        """SHA-256 hex digest of the passphrase, safe to use as a cache key."""
        return self._fingerprint

    def clear(self) -> None:
        """Zero and drop the stored passphrase."""
        if self._buffer is not None:
            zero_buffer(self._buffer)
            self._buffer = None

    @property
    def cleared(self) -> bool:
        return self._buffer is None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Passphrase):
            return NotImplemented
        return self._fingerprint == other._fingerprint

    def __hash__(self) -> int:
        return hash(self._fingerprint)

    def __repr__(self) -> str:
        return "Passphrase('********')"

    __str__ = __repr__


def to_passphrase(value: Union[None, str, bytes, bytearray, Passphrase]) -> Optional[Passphrase]:
    """Wrap a raw passphrase value, passing through None and existing secrets."""
    if value is None or isinstance(value, Passphrase):
        return value
    return Passphrase(value)
