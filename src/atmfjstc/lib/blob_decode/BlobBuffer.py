"""
This module contains the `BlobBuffer` class, an in-memory byte buffer with a read cursor, a limit and a byte order,
offering functions for extracting binary-encoded ints, byte strings and sub-buffers.
"""

import struct

from typing import Union, Optional, Callable

from .errors import BlobOutOfBoundsError, BlobUnterminatedDataError, BlobInvalidArgumentError


BytesLike = Union[bytes, bytearray, memoryview]

DEFAULT_BIG_ENDIAN = True


class BlobBuffer:
    """
    This class wraps a region of bytes and keeps track of a read position within it.

    The readable region runs from 0 to `limit()`. Every read starts at the current position and advances it by the
    number of bytes consumed. Reads are all-or-nothing: if there are not enough bytes left, an exception is raised and
    the position stays where it was.

    Slices (see `slice`) share the underlying storage with the buffer they were cut from, but have their own position,
    limit and byte order.
    """

    _view: memoryview
    _big_endian: bool
    _position: int

    def __init__(self, data: BytesLike, big_endian: bool = DEFAULT_BIG_ENDIAN):
        self._view = _parse_main_input_arg(data)
        self._big_endian = big_endian
        self._position = 0

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(position={self._position}, limit={self.limit()}, "
            f"big_endian={self._big_endian})"
        )

    @property
    def big_endian(self) -> bool:
        return self._big_endian

    def set_big_endian(self, big_endian: bool) -> 'BlobBuffer':
        self._big_endian = big_endian

        return self

    def tell(self) -> int:
        return self._position

    def limit(self) -> int:
        return len(self._view)

    def remaining(self) -> int:
        return len(self._view) - self._position

    def eof(self) -> bool:
        return self._position >= len(self._view)

    def seek(self, position: int) -> 'BlobBuffer':
        """
        Moves the read position to an absolute offset within ``[0, limit()]``.
        """
        if not (0 <= position <= len(self._view)):
            raise BlobInvalidArgumentError(f"Position {position} is outside the buffer (limit: {len(self._view)})")

        self._position = position

        return self

    def _take(self, n_bytes: int, meaning: Optional[str]) -> memoryview:
        if n_bytes < 0:
            raise BlobInvalidArgumentError(
                f"The number of bytes{f' for {meaning}' if meaning is not None else ''} cannot be negative "
                f"(is: {n_bytes})"
            )

        available = self.remaining()
        if n_bytes > available:
            raise BlobOutOfBoundsError(self._position, n_bytes, available, meaning)

        start = self._position
        self._position += n_bytes

        return self._view[start:self._position]

    def read_bytes(self, n_bytes: int, meaning: Optional[str] = None) -> bytes:
        """
        Reads exactly `n_bytes` from the buffer.

        Args:
            n_bytes: The amount of bytes to read.
            meaning: An indication as to the meaning of the data being read (e.g. "user ID"). It is used in the text
                of any exceptions that may be thrown.

        Returns:
            The data, as a fresh `bytes` object `n_bytes` in length.

        Raises:
            BlobOutOfBoundsError: If fewer than `n_bytes` bytes remain.
        """
        return self._take(n_bytes, meaning).tobytes()

    def read_remainder(self) -> bytes:
        return self.read_bytes(self.remaining())

    def skip(self, n_bytes: int, meaning: Optional[str] = None):
        """
        Skips over a number of bytes, ignoring the data. The bytes MUST be present.
        """
        self._take(n_bytes, meaning or 'skipped data')

    def slice(self, n_bytes: int, meaning: Optional[str] = None) -> 'BlobBuffer':
        """
        Cuts off the next `n_bytes` of this buffer into a new `BlobBuffer`.

        The new buffer aliases the same storage (nothing is copied), starts at position 0, is limited to `n_bytes`, and
        inherits this buffer's byte order. As a side effect, the position of this buffer advances past the sliced
        region.
        """
        return BlobBuffer(self._take(n_bytes, meaning or 'slice'), big_endian=self._big_endian)

    def read_struct(self, struct_format: str, meaning: Optional[str] = None) -> tuple:
        """
        Reads structured data from the buffer.

        Args:
            struct_format: The format of the structured data, as per the Python `struct` package. There is no need to
                prepend an endianness specifier, as one will be added automatically in accordance to the buffer's
                current setting, but if one is present, it will take precedence.
            meaning: An indication as to the meaning of the data being read (e.g. "file header"). It is used in the
                text of any exceptions that may be thrown.

        Returns:
           The data in the structure, as a tuple.
        """
        if struct_format == '':
            return ()
        if struct_format[0] not in '@=<>!':
            struct_format = ('>' if self._big_endian else '<') + struct_format

        meaning = meaning or f"struct ({struct_format})"

        return struct.unpack(struct_format, self._take(struct.calcsize(struct_format), meaning))

    def get_i8(self, meaning: Optional[str] = None) -> int:
        return self.read_struct('b', meaning or 'signed byte')[0]

    def get_u8(self, meaning: Optional[str] = None) -> int:
        return self.read_struct('B', meaning or 'unsigned byte')[0]

    def get_i16(self, meaning: Optional[str] = None) -> int:
        return self.read_struct('h', meaning or '16-bit int')[0]

    def get_i32(self, meaning: Optional[str] = None) -> int:
        return self.read_struct('i', meaning or '32-bit int')[0]

    def get_i64(self, meaning: Optional[str] = None) -> int:
        return self.read_struct('q', meaning or '64-bit int')[0]

    def read_bytes_until(self, predicate: Callable[[int], bool], meaning: Optional[str] = None) -> bytes:
        """
        Reads bytes up to the first one for which `predicate` holds.

        The terminating byte is consumed, but not included in the result. The predicate receives each byte as an int in
        the range 0..255.

        Raises:
            BlobUnterminatedDataError: If the end of the buffer is reached without finding a terminator. The position
                is left unchanged in this case.
        """
        start = self._position
        limit = len(self._view)

        for index in range(start, limit):
            if predicate(self._view[index]):
                data = self._view[start:index].tobytes()
                self._position = index + 1
                return data

        raise BlobUnterminatedDataError(start, limit - start, meaning)


def _parse_main_input_arg(input_: BytesLike) -> memoryview:
    if isinstance(input_, (bytes, bytearray)):
        return memoryview(input_)
    if not isinstance(input_, memoryview):
        raise TypeError(f"Input to BlobBuffer must be bytes, bytearray or memoryview, not {type(input_).__name__}")

    if (input_.ndim != 1) or (input_.format != 'B'):
        input_ = input_.cast('B')

    return input_
