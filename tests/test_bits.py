import pytest

from minzip.bits import (
    ByteReader,
    get1,
    get2be,
    get2le,
    get4be,
    get4le,
    get8be,
    get8le,
    pack1,
    pack2be,
    pack2le,
    pack4be,
    pack4le,
    pack8be,
    pack8le,
    pack_utf8_string,
)


def test_local_header_signature_little_endian():
    assert get4le(b"PK\x03\x04") == 0x04034B50


def test_end_of_central_directory_signature():
    assert get4le(b"PK\x05\x06") == 0x06054B50


def test_get_at_offset():
    data = b"xx" + pack4le(0x02014B50)
    assert get4le(data, 2) == 0x02014B50


@pytest.mark.parametrize(
    "pack, get, value",
    [
        (pack1, get1, 0xAB),
        (pack2be, get2be, 0xBEEF),
        (pack4be, get4be, 0xDEADBEEF),
        (pack8be, get8be, 0x0123456789ABCDEF),
        (pack2le, get2le, 0xBEEF),
        (pack4le, get4le, 0xDEADBEEF),
        (pack8le, get8le, 0x0123456789ABCDEF),
    ],
)
def test_round_trip(pack, get, value):
    assert get(pack(value)) == value


@pytest.mark.parametrize(
    "be, le",
    [(pack2be, pack2le), (pack4be, pack4le), (pack8be, pack8le)],
)
def test_endianness_is_mirrored(be, le):
    value = 0x0102030405060708
    assert be(value) == le(value)[::-1]


def test_pack_truncates_like_a_cast():
    assert pack2le(0x12345) == pack2le(0x2345)
    assert pack1(0x1FF) == pack1(0xFF)


def test_get_past_end_raises():
    with pytest.raises(ValueError):
        get4le(b"\x00\x01\x02")


def test_get_negative_offset_raises():
    with pytest.raises(ValueError):
        get2be(b"\x00\x01\x02", -1)


def test_pack_utf8_string_format():
    assert pack_utf8_string(b"abc") == b"\x00\x00\x00\x03abc"


def test_pack_utf8_string_encodes_text():
    encoded = pack_utf8_string("é")
    assert get4be(encoded) == len("é".encode("utf-8"))
    assert encoded[4:] == "é".encode("utf-8")


def test_reader_advances():
    data = pack1(7) + pack2be(300) + pack4le(70000) + pack8be(1 << 40)
    reader = ByteReader(data)
    assert reader.read1() == 7
    assert reader.read2be() == 300
    assert reader.read4le() == 70000
    assert reader.read8be() == 1 << 40
    assert reader.offset == len(data)


def test_reader_little_and_big():
    data = pack2le(513) + pack4be(99) + pack8le(12345) + pack2be(5) + pack4le(6)
    reader = ByteReader(data)
    assert reader.read2le() == 513
    assert reader.read4be() == 99
    assert reader.read8le() == 12345
    assert reader.read2be() == 5
    assert reader.read4le() == 6


def test_reader_start_offset():
    reader = ByteReader(b"\xff" + pack2le(42), 1)
    assert reader.read2le() == 42


def test_reader_past_end_raises():
    reader = ByteReader(b"\x01")
    with pytest.raises(ValueError):
        reader.read2le()


def test_skip_utf8_string():
    data = pack_utf8_string(b"hello") + pack1(9)
    reader = ByteReader(data)
    reader.skip_utf8_string()
    assert reader.read1() == 9


def test_read_utf8_string_truncates_but_advances():
    data = pack_utf8_string(b"hello") + pack1(9)
    reader = ByteReader(data)
    text, length = reader.read_utf8_string(3)
    assert text == b"he"
    assert length == len(b"hello")
    assert reader.read1() == 9


def test_read_utf8_string_fits():
    reader = ByteReader(pack_utf8_string(b"hi"))
    text, length = reader.read_utf8_string(16)
    assert (text, length) == (b"hi", 2)


def test_read_new_utf8_string_round_trip():
    reader = ByteReader(pack_utf8_string(b"archive/entry.txt"))
    assert reader.read_new_utf8_string() == b"archive/entry.txt"
    assert reader.offset == 4 + len(b"archive/entry.txt")


def test_read_string_running_past_end_raises_and_keeps_offset():
    data = pack4be(10) + b"abc"
    reader = ByteReader(data)
    with pytest.raises(ValueError):
        reader.read_new_utf8_string()
    assert reader.offset == 0