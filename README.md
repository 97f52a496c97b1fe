# minzip

A small, dependency-free library for reading the structure of zip archives,
together with the helpers it is built from.

## What is inside

- `minzip.archive`: `ZipArchive(path)` maps an archive, checks its signatures,
  walks the central directory and keeps the entries sorted by name. Entry names
  must be printable ASCII shorter than `PATH_MAX`, and only archives made on
  DOS/FAT or Unix are accepted. `find(name)` looks an entry up by name through a
  hash table, `len()`, indexing and iteration walk the sorted entries, `index()`
  gives an entry's position, and `read_raw(entry)` returns the entry's data
  exactly as stored. `ZipEntry` carries the offset, sizes, compression method,
  modification time, CRC-32 and attributes; `ZipEntry.is_symlink()` tells
  symbolic links apart. `compute_hash` and `valid_filename` are the name hash
  and name check the archive uses. Problems raise `ZipError`. `ZipArchive` is a
  context manager; `close()` releases the mapping and the file.
- `minzip.hashtable`: `HashTable`, an open-addressing table with linear probing
  and tombstones that grows once it is more than 5/8 full. It offers `lookup`
  (optionally adding), `remove`, `clear`, `foreach`, iteration, `len()`,
  `mem_usage`, `count_probes` and `probe_count` (which returns `ProbeStats`).
  `hash_size` and `round_up_power2` size tables.
- `minzip.bits`: `get1` … `get8le` read big- and little-endian unsigned
  integers at an offset, `pack1` … `pack8le` encode them (truncating to the
  field width), `pack_utf8_string` writes a 4-byte big-endian length followed
  by the bytes, and `ByteReader` walks a buffer reading the same fields and
  length-prefixed strings.
- `minzip.sysutil`: `load_file_in_memory`, `map_file` and `map_file_segment`
  load or map a file (a file object or descriptor) from its current offset or
  a given segment, returning a `MemMapping` whose `data` is a view of the bytes.
  `MemMapping` is a context manager; failures raise `MappingError`.
- `minzip.font`: the run-length bitmap font format for 96 ASCII glyphs:
  `encode_runs`, `decode_runs`, `encode_font` (from RGB pixel data),
  `format_font` (renders a C struct initialiser) and the `Font` class with
  `bitmap()`, `ascent()`, `measure()` and `glyph()`.

## Example

```python
from minzip.archive import ZipArchive, STORED

with ZipArchive("update.zip") as archive:
    for entry in archive:
        print(entry.name, entry.uncomp_len, entry.is_symlink())

    entry = archive.find("META-INF/version.txt")
    if entry is not None and entry.compression == STORED:
        print(archive.read_raw(entry))
```

## What it does not do

The package reads an archive's directory and hands back each entry's stored
bytes; it does not decompress deflated entries, verify CRCs, or unpack entries
onto disk. It also provides no command-line tool.

Install with `pip install .`, and run the tests with `pip install .[test]`
followed by `pytest`.