"""Reading and writing fixed-width integers and length-prefixed strings."""

from __future__ import annotations

import struct

_U8 = struct.Struct("B")
_U16BE = struct.Struct(">H")
_U32BE = struct.Struct(">I")
_U64BE = struct.Struct(">Q")
_U16LE = struct.Struct("<H")
_U32LE = struct.Struct("<I")
_U64LE = struct.Struct("<Q")

_MASKS = {1: 0xFF, 2: 0xFFFF, 4: 0xFFFFFFFF, 8: 0xFFFFFFFFFFFFFFFF}


def _unpack(fmt: struct.Struct, data, offset: int) -> int:
    if offset < 0:
        raise ValueError(f"negative offset {offset}")
    try:
        return fmt.unpack_from(data, offset)[0]
    except struct.error as exc:
        raise ValueError(
            f"need {fmt.size} bytes at offset {offset}, buffer holds {len(data)}"
        ) from exc


def _pack(fmt: struct.Struct, value: int) -> bytes:
    # Like a C cast, values are truncated to the field width.
    return fmt.pack(value & _MASKS[fmt.size])


def get1(data, offset: int = 0) -> int:
    """Return the byte at ``offset``."""
    return _unpack(_U8, data, offset)


def get2be(data, offset: int = 0) -> int:
    """Return 2 big-endian bytes at ``offset`` as an unsigned integer."""
    return _unpack(_U16BE, data, offset)


def get4be(data, offset: int = 0) -> int:
    """Return 4 big-endian bytes at ``offset`` as an unsigned integer."""
    return _unpack(_U32BE, data, offset)


def get8be(data, offset: int = 0) -> int:
    """Return 8 big-endian bytes at ``offset`` as an unsigned integer."""
    return _unpack(_U64BE, data, offset)


def get2le(data, offset: int = 0) -> int:
    """Return 2 little-endian bytes at ``offset`` as an unsigned integer."""
    return _unpack(_U16LE, data, offset)


def get4le(data, offset: int = 0) -> int:
    """Return 4 little-endian bytes at ``offset`` as an unsigned integer."""
    return _unpack(_U32LE, data, offset)


def get8le(data, offset: int = 0) -> int:
    """Return 8 little-endian bytes at ``offset`` as an unsigned integer."""
    return _unpack(_U64LE, data, offset)


def pack1(value: int) -> bytes:
    """Encode the low byte of ``value``."""
    return _pack(_U8, value)


def pack2be(value: int) -> bytes:
    """Encode ``value`` as 2 big-endian bytes."""
    return _pack(_U16BE, value)


def pack4be(value: int) -> bytes:
    """Encode ``value`` as 4 big-endian bytes."""
    return _pack(_U32BE, value)


def pack8be(value: int) -> bytes:
    """Encode ``value`` as 8 big-endian bytes."""
    return _pack(_U64BE, value)


def pack2le(value: int) -> bytes:
    """Encode ``value`` as 2 little-endian bytes."""
    return _pack(_U16LE, value)


def pack4le(value: int) -> bytes:
    """Encode ``value`` as 4 little-endian bytes."""
    return _pack(_U32LE, value)


def pack8le(value: int) -> bytes:
    """Encode ``value`` as 8 little-endian bytes."""
    return _pack(_U64LE, value)


def pack_utf8_string(text: str | bytes) -> bytes:
    """Encode ``text`` as a 4-byte big-endian length followed by its UTF-8 bytes."""
    raw = text.encode("utf-8") if isinstance(text, str) else bytes(text)
    return pack4be(len(raw)) + raw


class ByteReader:
    """Sequential reader over a byte buffer; ``offset`` advances with each read."""

    def __init__(self, data, offset: int = 0) -> None:
        if offset < 0:
            raise ValueError(f"negative offset {offset}")
        self.data = data
        self.offset = offset

    def _take(self, fmt: struct.Struct) -> int:
        value = _unpack(fmt, self.data, self.offset)
        self.offset += fmt.size
        return value

    def _span(self, length: int) -> bytes:
        end = self.offset + length
        if end > len(self.data):
            raise ValueError(
                f"string of {length} bytes at offset {self.offset} runs past the end"
            )
        return bytes(self.data[self.offset:end])

    def read1(self) -> int:
        """Read one byte."""
        return self._take(_U8)

    def read2be(self) -> int:
        """Read 2 big-endian bytes."""
        return self._take(_U16BE)

    def read4be(self) -> int:
        """Read 4 big-endian bytes."""
        return self._take(_U32BE)

    def read8be(self) -> int:
        """Read 8 big-endian bytes."""
        return self._take(_U64BE)

    def read2le(self) -> int:
        """Read 2 little-endian bytes."""
        return self._take(_U16LE)

    def read4le(self) -> int:
        """Read 4 little-endian bytes."""
        return self._take(_U32LE)

    def read8le(self) -> int:
        """Read 8 little-endian bytes."""
        return self._take(_U64LE)

    def skip_utf8_string(self) -> None:
        """Skip over a length-prefixed string."""
        start = self.offset
        length = self.read4be()
        if self.offset + length > len(self.data):
            self.offset = start
            raise ValueError(f"string of {length} bytes runs past the end")
        self.offset += length

    def read_utf8_string(self, buf_len: int) -> tuple[bytes, int]:
        """Read a length-prefixed string as if into a buffer of ``buf_len`` bytes.

        At most ``buf_len - 1`` bytes are kept (room for a terminator); the
        reader still advances past the whole string. Returns the kept bytes
        and the original length.
        """
        if buf_len < 1:
            raise ValueError("buffer length must be at least 1")
        start = self.offset
        length = self.read4be()
        try:
            raw = self._span(length)
        except ValueError:
            self.offset = start
            raise
        copy_len = length if length < buf_len else buf_len - 1
        self.offset += length
        return raw[:copy_len], length

    def read_new_utf8_string(self) -> bytes:
        """Read a whole length-prefixed string."""
        start = self.offset
        length = self.read4be()
        try:
            raw = self._span(length)
        except ValueError:
            self.offset = start
            raise
        self.offset += length
        return raw