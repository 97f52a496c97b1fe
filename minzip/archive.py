"""Reading the central directory of a Zip archive and locating its entries."""

from __future__ import annotations

import logging
import stat
from dataclasses import dataclass
from typing import Iterator, Optional

from .bits import get2le, get4le
from .hashtable import HashTable, hash_size
from .sysutil import MappingError, MemMapping, map_file

log = logging.getLogger("minzip")

CENSIG = 0x02014B50
CENHDR = 46
CENVEM = 4
CENHOW = 10
CENTIM = 12
CENCRC = 16
CENSIZ = 20
CENLEN = 24
CENNAM = 28
CENEXT = 30
CENCOM = 32
CENATX = 38
CENOFF = 42

ENDSIG = 0x06054B50
ENDHDR = 22
ENDSUB = 8
ENDOFF = 16

LOCSIG = 0x04034B50
LOCHDR = 30
LOCNAM = 26
LOCEXT = 28

STORED = 0
DEFLATED = 8

CENVEM_UNIX = 3 << 8

PATH_MAX = 4096

_ENDSIG_BYTES = ENDSIG.to_bytes(4, "little")
_MASK32 = 0xFFFFFFFF


class ZipError(Exception):
    """The file is not a usable Zip archive."""


def _name_bytes(name) -> bytes:
    return name.encode("utf-8") if isinstance(name, str) else bytes(name)


def compute_hash(name) -> int:
    """Hash of an entry name; starts from 2 and multiplies by 31 per byte."""
    value = 2
    for byte in _name_bytes(name):
        value = (value * 31 + byte) & _MASK32
    return value


def valid_filename(name) -> bool:
    """True if ``name`` is shorter than PATH_MAX and all printable ASCII."""
    raw = _name_bytes(name)
    if len(raw) >= PATH_MAX:
        log.warning("Filename too long (%d characters)", len(raw))
        return False
    for byte in raw:
        if byte < 32 or byte >= 127:
            log.warning("Filename contains invalid character '\\%03o'", byte)
            return False
    return True


@dataclass(frozen=True, eq=False)
class ZipEntry:
    """One entry of the central directory; ``offset`` is where its data starts."""

    name: str
    offset: int
    comp_len: int
    uncomp_len: int
    compression: int
    mod_time: int
    crc32: int
    version_made_by: int
    external_file_attributes: int

    def is_symlink(self) -> bool:
        """True if the entry was made on Unix and its mode is a symbolic link."""
        if (self.version_made_by & 0xFF00) == CENVEM_UNIX:
            return stat.S_ISLNK(self.external_file_attributes >> 16)
        return False


def _compare_names(left, right) -> int:
    """Order two names by length first, then byte by byte."""
    left_raw = _name_bytes(left)
    right_raw = _name_bytes(right)
    if len(left_raw) != len(right_raw):
        return len(left_raw) - len(right_raw)
    for a, b in zip(left_raw, right_raw):
        if a != b:
            return a - b
    return 0


def _compare_entries(table_item: ZipEntry, loose: ZipEntry) -> int:
    return _compare_names(table_item.name, loose.name)


def _compare_name(table_item: ZipEntry, name: str) -> int:
    return _compare_names(table_item.name, name)


class ZipArchive:
    """An open Zip archive whose entries are sorted by name."""

    def __init__(self, path) -> None:
        self.path = path
        self._file = None
        self._map: Optional[MemMapping] = None
        self._entries: list[ZipEntry] = []
        self._hash: Optional[HashTable] = None
        try:
            try:
                self._file = open(path, "rb")
            except OSError as exc:
                raise ZipError(f"unable to open {path!r}: {exc}") from exc
            try:
                self._map = map_file(self._file)
            except MappingError as exc:
                raise ZipError(f"map of {path!r} failed: {exc}") from exc
            if self._map.length < ENDHDR:
                raise ZipError(
                    f"file {path!r} too small to be zip ({self._map.length})"
                )
            self._parse()
        except BaseException:
            self.close()
            raise

    def _parse(self) -> None:
        mapping = self._map
        length = mapping.length
        data = mapping.data
        try:
            val = get4le(data, 0)
            if val == ENDSIG:
                raise ZipError("found Zip archive, but it looks empty")
            if val != LOCSIG:
                raise ZipError(f"not a Zip archive (found 0x{val:08x})")

            base_off = mapping.offset
            eocd = mapping.base.rfind(
                _ENDSIG_BYTES, base_off, base_off + length - ENDHDR + 4
            )
            if eocd < 0:
                raise ZipError("could not find end-of-central-directory in Zip")
            eocd -= base_off

            num_entries = get2le(data, eocd + ENDSUB)
            cd_offset = get4le(data, eocd + ENDOFF)
            if num_entries == 0 or cd_offset >= length:
                raise ZipError(
                    f"invalid entries={num_entries} offset={cd_offset} (len={length})"
                )

            entries = []
            ptr = cd_offset
            for i in range(num_entries):
                if ptr + CENHDR > length:
                    raise ZipError(f"ran off the end (at {i})")
                if get4le(data, ptr) != CENSIG:
                    raise ZipError(f"missed a central dir sig (at {i})")

                local_offset = get4le(data, ptr + CENOFF)
                name_len = get2le(data, ptr + CENNAM)
                extra_len = get2le(data, ptr + CENEXT)
                comment_len = get2le(data, ptr + CENCOM)
                name_start = ptr + CENHDR
                if name_start + name_len > length:
                    raise ZipError(f"filename ran off the end (at {i})")
                raw_name = bytes(data[name_start:name_start + name_len])
                if not valid_filename(raw_name):
                    raise ZipError(f"invalid filename (at {i})")

                version_made_by = get2le(data, ptr + CENVEM)
                system = version_made_by & 0xFF00
                if system != 0 and system != CENVEM_UNIX:
                    raise ZipError(
                        f'incompatible "version made by": 0x{version_made_by >> 8:02x} '
                        f"(at {i})"
                    )

                if local_offset + LOCHDR > length:
                    raise ZipError(
                        f"bad offset to local header: {local_offset} (at {i})"
                    )
                if get4le(data, local_offset) != LOCSIG:
                    raise ZipError(f"missed a local header sig (at {i})")
                offset = (
                    local_offset + LOCHDR
                    + get2le(data, local_offset + LOCNAM)
                    + get2le(data, local_offset + LOCEXT)
                )
                comp_len = get4le(data, ptr + CENSIZ)
                if offset + comp_len > length:
                    raise ZipError(f"data ran off the end (at {i})")

                entries.append(ZipEntry(
                    name=raw_name.decode("ascii"),
                    offset=offset,
                    comp_len=comp_len,
                    uncomp_len=get4le(data, ptr + CENLEN),
                    compression=get2le(data, ptr + CENHOW),
                    mod_time=get4le(data, ptr + CENTIM),
                    crc32=get4le(data, ptr + CENCRC),
                    version_made_by=version_made_by,
                    external_file_attributes=get4le(data, ptr + CENATX),
                ))
                ptr += CENHDR + name_len + extra_len + comment_len
        finally:
            data.release()

        entries.sort(key=lambda entry: entry.name.encode("ascii"))
        table = HashTable(hash_size(len(entries)))
        for entry in entries:
            found = table.lookup(compute_hash(entry.name), entry, _compare_entries, True)
            if found is not entry:
                log.warning("WARNING: duplicate entry '%s' in Zip", found.name)
        self._entries = entries
        self._hash = table

    def _check_open(self) -> None:
        if self._hash is None:
            raise ValueError("archive is closed")

    def close(self) -> None:
        """Release the mapping and the file; safe to call more than once."""
        if self._map is not None:
            self._map.release()
            self._map = None
        if self._file is not None:
            self._file.close()
            self._file = None
        self._entries = []
        self._hash = None

    def __enter__(self) -> ZipArchive:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def find(self, name) -> Optional[ZipEntry]:
        """The entry called ``name``, or None."""
        self._check_open()
        if isinstance(name, (bytes, bytearray)):
            try:
                name = bytes(name).decode("ascii")
            except UnicodeDecodeError:
                return None
        return self._hash.lookup(compute_hash(name), name, _compare_name, False)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> ZipEntry:
        self._check_open()
        if not isinstance(index, int) or isinstance(index, bool):
            raise TypeError("entry index must be an integer")
        if not 0 <= index < len(self._entries):
            raise IndexError(f"entry index {index} out of range")
        return self._entries[index]

    def __iter__(self) -> Iterator[ZipEntry]:
        self._check_open()
        return iter(list(self._entries))

    def index(self, entry: ZipEntry) -> int:
        """Position of ``entry`` in the sorted entry list."""
        self._check_open()
        for position, candidate in enumerate(self._entries):
            if candidate is entry:
                return position
        raise ValueError("entry is not part of this archive")

    def read_raw(self, entry: ZipEntry) -> bytes:
        """The entry's data exactly as stored (compressed if it is deflated)."""
        self._check_open()
        if entry.offset + entry.comp_len > self._map.length:
            raise ZipError("entry data runs past the end of the archive")
        data = self._map.data
        try:
            return bytes(data[entry.offset:entry.offset + entry.comp_len])
        finally:
            data.release()