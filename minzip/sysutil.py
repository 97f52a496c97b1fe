"""Loading and memory-mapping files, or parts of them, from the current offset."""

from __future__ import annotations

import logging
import mmap
import os
from dataclasses import dataclass

log = logging.getLogger("minzip")

# mmap offsets must be aligned to this value.
PAGE_SIZE = max(4096, mmap.ALLOCATIONGRANULARITY)


class MappingError(OSError):
    """A file could not be loaded or mapped."""


@dataclass
class MemMapping:
    """A loaded or mapped region; ``data`` covers ``length`` bytes past ``offset``."""

    base: object
    offset: int
    length: int

    @property
    def base_length(self) -> int:
        """Length of the whole underlying region."""
        return 0 if self.base is None else len(self.base)

    @property
    def data(self) -> memoryview:
        """A view of the mapped data."""
        if self.base is None:
            raise ValueError("mapping has been released")
        return memoryview(self.base)[self.offset:self.offset + self.length]

    @property
    def released(self) -> bool:
        return self.base is None

    def __len__(self) -> int:
        return self.length

    def release(self) -> None:
        """Release the region; a mapping still in use is kept and a warning logged."""
        if self.base is None:
            return
        if isinstance(self.base, mmap.mmap):
            try:
                self.base.close()
            except BufferError as exc:
                log.warning("munmap of %d bytes failed: %s", len(self.base), exc)
                return
        self.base = None

    def __enter__(self) -> MemMapping:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


def _fileno(file) -> int:
    return file if isinstance(file, int) else file.fileno()


def _start_and_length(file) -> tuple[int, int]:
    try:
        if isinstance(file, int):
            start = os.lseek(file, 0, os.SEEK_CUR)
            end = os.lseek(file, 0, os.SEEK_END)
            os.lseek(file, start, os.SEEK_SET)
        else:
            start = file.tell()
            end = file.seek(0, os.SEEK_END)
            file.seek(start, os.SEEK_SET)
    except OSError as exc:
        log.error("could not determine length of file")
        raise MappingError("could not determine length of file") from exc
    length = end - start
    if length <= 0:
        log.error("file is empty")
        raise MappingError("file is empty")
    return start, length


def load_file_in_memory(file) -> MemMapping:
    """Read everything from the file's current offset into a writable buffer."""
    _, length = _start_and_length(file)
    buffer = bytearray(length)
    view = memoryview(buffer)
    actual = 0
    try:
        while actual < length:
            if isinstance(file, int):
                chunk = os.read(file, length - actual)
                n = len(chunk)
                view[actual:actual + n] = chunk
            else:
                n = file.readinto(view[actual:]) or 0
            if n == 0:
                break
            actual += n
    finally:
        view.release()
    if actual != length:
        log.error("only read %d of %d bytes", actual, length)
        raise MappingError(f"only read {actual} of {length} bytes")
    return MemMapping(buffer, 0, length)


def map_file(file) -> MemMapping:
    """Map the file read-only from its current offset, which must be page-aligned."""
    start, length = _start_and_length(file)
    try:
        region = mmap.mmap(
            _fileno(file), length, access=mmap.ACCESS_READ, offset=start
        )
    except (OSError, ValueError) as exc:
        log.warning("mmap(%d, R, %d) failed: %s", length, start, exc)
        raise MappingError(f"mmap of {length} bytes at {start} failed: {exc}") from exc
    return MemMapping(region, 0, length)


def map_file_segment(file, start: int, length: int) -> MemMapping:
    """Map ``length`` bytes starting at absolute position ``start`` read-only."""
    _, file_length = _start_and_length(file)
    if start < 0 or length < 0 or start + length > file_length:
        log.warning("bad segment: st=%d len=%d flen=%d", start, length, file_length)
        raise MappingError(
            f"bad segment: start={start} length={length} file length={file_length}"
        )
    adjust = start % PAGE_SIZE
    actual_start = start - adjust
    actual_length = length + adjust
    try:
        region = mmap.mmap(
            _fileno(file), actual_length, access=mmap.ACCESS_READ, offset=actual_start
        )
    except (OSError, ValueError) as exc:
        log.warning("mmap(%d, R, %d) failed: %s", actual_length, actual_start, exc)
        raise MappingError(
            f"mmap of {actual_length} bytes at {actual_start} failed: {exc}"
        ) from exc
    return MemMapping(region, adjust, length)