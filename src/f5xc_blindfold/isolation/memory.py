"""Best-effort wiping of plaintext buffers.

Unsealed plaintext handed back to a caller has to live in process memory
for as long as the caller needs it.  Once it has been written out, the
buffer should be zeroed rather than left for the garbage collector.

**Python limitation:** ``bytes`` and ``str`` are immutable and may have been
copied by the runtime, so only ``bytearray`` buffers can be wiped::

    with SecureMemory(bytearray(plaintext)) as data:
        out.write(data)
    # data has been wiped
"""
from __future__ import annotations

import ctypes


def wipe(data: bytearray) -> None:
    """Overwrite *data* with zeros in-place.

    Uses ``ctypes.memset`` on the underlying buffer so the store cannot be
    optimised away.

    Raises
    ------
    TypeError
        If *data* is not a ``bytearray``.
    """
    if not isinstance(data, bytearray):
        raise TypeError(f"Expected bytearray, got {type(data).__name__}")
    if len(data) == 0:
        return
    buf = (ctypes.c_char * len(data)).from_buffer(data)
    ctypes.memset(ctypes.addressof(buf), 0, len(data))


class SecureMemory:
    """Context manager that wipes a ``bytearray`` on exit.

    The buffer is wiped whether or not the block raised.
    """

    __slots__ = ("_data", "_wiped")

    def __init__(self, data: bytearray) -> None:
        if not isinstance(data, bytearray):
            raise TypeError(f"SecureMemory requires bytearray, got {type(data).__name__}")
        self._data = data
        self._wiped = False

    def __enter__(self) -> bytearray:
        return self._data

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.wipe()

    def wipe(self) -> None:
        """Wipe the managed buffer; later calls are no-ops."""
        if not self._wiped:
            wipe(self._data)
            self._wiped = True

    @property
    def wiped(self) -> bool:
        return self._wiped
