"""Run-length encoded bitmap fonts of 96 printable ASCII glyphs."""

from __future__ import annotations

from dataclasses import dataclass

GLYPH_COUNT = 96
FIRST_CHAR = 32
MAX_RUN = 127
_LIT = 0x80
_PER_LINE = 15


@dataclass(frozen=True)
class Font:
    """A font strip ``width`` x ``height`` holding 96 glyphs side by side."""

    width: int
    height: int
    cwidth: int
    cheight: int
    rundata: bytes

    def bitmap(self) -> bytes:
        """Decode the strip into ``width * height`` bytes of 0 or 255."""
        return decode_runs(self.rundata, self.width * self.height)

    def ascent(self) -> int:
        """Distance from the top of a glyph to its baseline."""
        return self.cheight - 2

    def measure(self, text: str) -> int:
        """Width in pixels of ``text`` drawn in this font."""
        return self.cwidth * len(text)

    def glyph(self, char: str):
        """Rows of the glyph for ``char``, or None if it has no glyph."""
        if len(char) != 1:
            raise ValueError("glyph() takes a single character")
        off = ord(char) - FIRST_CHAR
        if not 0 <= off < GLYPH_COUNT:
            return None
        bits = self.bitmap()
        left = off * self.cwidth
        rows = range(0, min(self.cheight, self.height) * self.width, self.width)
        return tuple(bits[row + left:row + left + self.cwidth] for row in rows)


def encode_runs(pixels) -> bytes:
    """Encode lit (truthy) and dark pixels as runs, ending with a 0 byte.

    Each run byte holds a count of 1..127 in its low bits and 0x80 if lit.
    """
    out = bytearray()
    run_val = None
    run_count = 0
    for pixel in pixels:
        val = bool(pixel)
        if run_val is not None and val == run_val and run_count < MAX_RUN:
            run_count += 1
            continue
        if run_val is not None:
            out.append(run_count | (_LIT if run_val else 0))
        run_val = val
        run_count = 1
    if run_val is None:
        raise ValueError("no pixels to encode")
    out.append(run_count | (_LIT if run_val else 0))
    out.append(0)
    return bytes(out)


def decode_runs(rundata, size: int) -> bytes:
    """Expand run data into ``size`` bytes of 255 (lit) and 0, stopping at a 0 byte."""
    bits = bytearray(size)
    pos = 0
    for data in rundata:
        if data == 0:
            break
        count = data & MAX_RUN
        if pos + count > size:
            raise ValueError(f"run data overflows a bitmap of {size} bytes")
        if data & _LIT:
            bits[pos:pos + count] = b"\xff" * count
        pos += count
    return bytes(bits)


def encode_font(pixels, width: int, height: int) -> Font:
    """Build a font from RGB image data; a pixel whose first channel is 0 is ink."""
    if width <= 0 or height <= 0:
        raise ValueError("image must not be empty")
    data = bytes(pixels)
    if len(data) != width * height * 3:
        raise ValueError(
            f"expected {width * height * 3} bytes of RGB data, got {len(data)}"
        )
    ink = (red == 0 for red in data[::3])
    return Font(width, height, width // GLYPH_COUNT, height, encode_runs(ink))


def format_font(font: Font) -> str:
    """Render ``font`` as a struct initialiser with its run data, 15 runs a line."""
    runs = bytes(font.rundata)
    end = runs.find(0)
    if end >= 0:
        runs = runs[:end]
    if not runs:
        raise ValueError("font has no run data")
    lines = [
        "struct {\n",
        "  unsigned width;\n",
        "  unsigned height;\n",
        "  unsigned cwidth;\n",
        "  unsigned cheight;\n",
        "  unsigned char rundata[];\n",
        "} font = {\n",
        f"  .width = {font.width},\n  .height = {font.height},\n"
        f"  .cwidth = {font.cwidth},\n  .cheight = {font.cheight},\n",
        "  .rundata = {\n",
    ]
    for count, run in enumerate(runs[:-1], start=1):
        lines.append(f"0x{run:02x},")
        if count % _PER_LINE == 0:
            lines.append("\n")
    lines.append(f"0x{runs[-1]:02x},")
    lines.append("\n0x00,")
    lines.append("\n")
    lines.append("  }\n};\n")
    return "".join(lines)