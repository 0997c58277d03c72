import struct

import pytest

from gw2assets.dxt import decode_dxt1, decode_dxt3, decode_dxt5, decode_dxtl
from gw2assets.image import (
    DdsHeader,
    TextureFormat,
    decode_atex_buffer,
    is_valid_header,
    lowest_set_bit,
    read_dds,
    uncompressed_atex_size,
)


def dds_header(width, height, flags, four_cc=0, bits=0,
               masks=(0, 0, 0, 0), magic=b"DDS ", size=124, pf_size=32):
    return (
        magic
        + struct.pack("<7I", size, 0x1007, height, width, 0, 0, 1)
        + bytes(44)
        + struct.pack("<8I", pf_size, flags, four_cc, bits, *masks)
        + struct.pack("<5I", 0x1000, 0, 0, 0, 0)
    )


ARGB_MASKS = (0x00FF0000, 0x0000FF00, 0x000000FF, 0xFF000000)


@pytest.mark.parametrize("bit", [0, 3, 8, 16, 31])
def test_lowest_set_bit_of_single_bit(bit):
    assert lowest_set_bit(1 << bit) == bit


def test_lowest_set_bit_of_mask_with_several_bits():
    assert lowest_set_bit(0x00FF0000) == lowest_set_bit(1 << 16)


def test_header_parse_reads_fields():
    data = dds_header(8, 4, 0x40, bits=32, masks=ARGB_MASKS)
    header = DdsHeader.parse(data)
    assert header.magic == int.from_bytes(b"DDS ", "little")
    assert header.size == 124
    assert (header.width, header.height) == (8, 4)
    assert header.pixel_format.size == 32
    assert header.pixel_format.rgb_bit_count == 32
    assert header.pixel_format.r_bit_mask == ARGB_MASKS[0]
    assert header.pixel_format.a_bit_mask == ARGB_MASKS[3]


def test_header_parse_rejects_short_data():
    with pytest.raises(ValueError):
        DdsHeader.parse(bytes(64))


def test_valid_header_png_and_jpeg():
    assert is_valid_header(b"\x89PNG\r\n\x1a\n" + bytes(8))
    assert is_valid_header(b"\xff\xd8\xff\xe0" + bytes(12))


def test_valid_header_too_short():
    assert not is_valid_header(b"\x89PNG")


def test_valid_header_webp():
    assert is_valid_header(b"RIFF" + bytes(4) + b"WEBP" + bytes(4))
    assert not is_valid_header(b"RIFF" + bytes(4) + b"WAVE" + bytes(4))


def test_valid_header_dds_variants():
    assert is_valid_header(dds_header(4, 4, 0x4, four_cc=TextureFormat.DXT1))
    assert is_valid_header(dds_header(4, 4, 0x20000, bits=8))
    assert is_valid_header(dds_header(4, 4, 0x40, bits=32))
    assert not is_valid_header(dds_header(4, 4, 0x40, bits=24))
    assert not is_valid_header(dds_header(4, 4, 0x4)[:64])


def test_valid_header_atex():
    assert is_valid_header(b"ATEX" + b"DXT5" + bytes(8))
    assert is_valid_header(b"ATTX" + b"3DCX" + bytes(8))
    assert not is_valid_header(b"ATEX" + b"XXXX" + bytes(8))
    assert not is_valid_header(b"ABCD" + b"DXT1" + bytes(8))


def test_uncompressed_atex_size_dxt1_block():
    assert uncompressed_atex_size(4, 4, TextureFormat.DXT1) == 8


def test_uncompressed_atex_size_ratios():
    for w, h in [(4, 4), (5, 9), (128, 64)]:
        small = uncompressed_atex_size(w, h, TextureFormat.DXTA)
        large = uncompressed_atex_size(w, h, TextureFormat.THREE_DCX)
        assert large == 2 * small
    assert uncompressed_atex_size(5, 5, TextureFormat.DXT5) == 4 * uncompressed_atex_size(
        4, 4, TextureFormat.DXT5
    )


def test_uncompressed_atex_size_unknown_format():
    with pytest.raises(ValueError):
        uncompressed_atex_size(4, 4, 0x12345678)


def test_read_dds_luminance():
    pixels = bytes(range(16))
    image = read_dds(dds_header(4, 4, 0x20000, bits=8) + pixels)
    assert (image.width, image.height) == (4, 4)
    assert image.rgb == bytes(v for v in pixels for _ in range(3))
    assert image.alpha is None


def test_read_dds_luminance_truncated():
    with pytest.raises(ValueError):
        read_dds(dds_header(4, 4, 0x20000, bits=8) + bytes(10))


def test_read_dds_uncompressed_with_alpha():
    body = struct.pack("<2I", 0x80112233, 0xFF445566)
    image = read_dds(dds_header(2, 1, 0x41, bits=32, masks=ARGB_MASKS) + body)
    assert image.pixel(0, 0) == (0x11, 0x22, 0x33)
    assert image.pixel(1, 0) == (0x44, 0x55, 0x66)
    assert image.alpha == bytes((0x80, 0xFF))


def test_read_dds_uncompressed_without_alpha():
    body = struct.pack("<I", 0x80112233)
    image = read_dds(dds_header(1, 1, 0x40, bits=32, masks=ARGB_MASKS) + body)
    assert image.rgb == bytes((0x11, 0x22, 0x33))
    assert image.alpha is None


def test_read_dds_uncompressed_rejects_24_bit():
    with pytest.raises(ValueError):
        read_dds(dds_header(1, 1, 0x40, bits=24, masks=ARGB_MASKS) + bytes(4))


def test_read_dds_compressed_matches_block_decoders():
    payload = struct.pack("<HHI", 0xF800, 0x001F, 0x1B1B1B1B) * 4
    image = read_dds(dds_header(8, 8, 0x4, four_cc=TextureFormat.DXT1) + payload)
    assert image == decode_dxt1(payload, 8, 8)

    payload16 = bytes(range(16)) * 1
    dxt3 = read_dds(dds_header(4, 4, 0x4, four_cc=TextureFormat.DXT3) + payload16)
    assert dxt3 == decode_dxt3(payload16, 4, 4)
    dxt5 = read_dds(dds_header(4, 4, 0x4, four_cc=TextureFormat.DXT4) + payload16)
    assert dxt5 == decode_dxt5(payload16, 4, 4)


def test_read_dds_r32f_is_unsupported():
    with pytest.raises(ValueError):
        read_dds(dds_header(4, 4, 0x4, four_cc=114) + bytes(64))


@pytest.mark.parametrize(
    "kwargs",
    [{"magic": b"XXXX"}, {"size": 100}, {"pf_size": 16}],
)
def test_read_dds_rejects_bad_header(kwargs):
    data = dds_header(4, 4, 0x20000, bits=8, **kwargs) + bytes(16)
    with pytest.raises(ValueError):
        read_dds(data)


def test_read_dds_rejects_unknown_pixel_format():
    with pytest.raises(ValueError):
        read_dds(dds_header(4, 4, 0) + bytes(64))


def test_decode_atex_dxtn_uses_explicit_alpha():
    buffer = bytes(range(32))
    assert decode_atex_buffer(TextureFormat.DXTN, buffer, 8, 4) == decode_dxt3(buffer, 8, 4)


def test_decode_atex_dxtl_premultiplies():
    buffer = bytes(range(100, 116))
    assert decode_atex_buffer(TextureFormat.DXTL, buffer, 4, 4) == decode_dxtl(buffer, 4, 4)


def test_decode_atex_accepts_plain_integer_format():
    buffer = bytes(range(16))
    result = decode_atex_buffer(int(TextureFormat.DXT5), buffer, 4, 4)
    assert result == decode_dxt5(buffer, 4, 4)


def test_decode_atex_widens_126_by_64():
    size = uncompressed_atex_size(128, 64, TextureFormat.DXT1)
    image = decode_atex_buffer(TextureFormat.DXT1, bytes(size), 126, 64)
    assert (image.width, image.height) == (128, 64)
    assert len(image.rgb) == 128 * 64 * 3


def test_decode_atex_unknown_format():
    with pytest.raises(ValueError):
        decode_atex_buffer(0x12345678, bytes(16), 4, 4)


def test_decode_atex_truncated_buffer():
    with pytest.raises(ValueError):
        decode_atex_buffer(TextureFormat.DXT1, bytes(4), 4, 4)