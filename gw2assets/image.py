"""Recognition and decoding of DDS and ATEX-family texture files."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Union

from gw2assets.dxt import (
    DecodedImage,
    decode_3dcx,
    decode_dxt1,
    decode_dxt3,
    decode_dxt5,
    decode_dxta,
    decode_dxtl,
)


def _fourcc(tag: bytes) -> int:
    return int.from_bytes(tag, "little")


class TextureFormat(IntEnum):
    """Compression formats a texture may be stored in, as four-character codes."""

    DXT1 = _fourcc(b"DXT1")
    DXT2 = _fourcc(b"DXT2")
    DXT3 = _fourcc(b"DXT3")
    DXT4 = _fourcc(b"DXT4")
    DXT5 = _fourcc(b"DXT5")
    DXTA = _fourcc(b"DXTA")
    DXTL = _fourcc(b"DXTL")
    DXTN = _fourcc(b"DXTN")
    THREE_DCX = _fourcc(b"3DCX")


_FCC_DDS = _fourcc(b"DDS ")
_FCC_PNG = _fourcc(b"\x89PNG")
_FCC_JPEG = 0xFFD8FF
_FCC_RIFF = _fourcc(b"RIFF")
_FCC_WEBP = _fourcc(b"WEBP")
_FCC_R32F = 114
_ATEX_MAGICS = frozenset(
    _fourcc(tag) for tag in (b"ATEX", b"ATTX", b"ATEP", b"ATEU", b"ATEC", b"ATET")
)

_DDPF_ALPHAPIXELS = 0x1
_DDPF_FOURCC = 0x4
_DDPF_RGB = 0x40
_DDPF_LUMINANCE = 0x20000

_DXT8_FORMATS = frozenset((TextureFormat.DXT1, TextureFormat.DXTA))
_DXT16_FORMATS = frozenset(
    (
        TextureFormat.DXT2,
        TextureFormat.DXT3,
        TextureFormat.DXT4,
        TextureFormat.DXT5,
        TextureFormat.DXTL,
        TextureFormat.DXTN,
        TextureFormat.THREE_DCX,
    )
)


@dataclass(frozen=True)
class DdsPixelFormat:
    """The pixel format block of a DDS header."""

    size: int
    flags: int
    four_cc: int
    rgb_bit_count: int
    r_bit_mask: int
    g_bit_mask: int
    b_bit_mask: int
    a_bit_mask: int

    SIZE: ClassVar[int] = 32


@dataclass(frozen=True)
class DdsHeader:
    """A DDS file header, including its leading magic number."""

    magic: int
    size: int
    flags: int
    height: int
    width: int
    pitch_or_linear_size: int
    depth: int
    mipmap_count: int
    pixel_format: DdsPixelFormat
    caps: int
    caps2: int
    caps3: int
    caps4: int

    SIZE: ClassVar[int] = 128
    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<8I44x8I5I")

    @classmethod
    def parse(cls, data: bytes) -> "DdsHeader":
        """Read the header from the start of ``data``."""
        if len(data) < cls.SIZE:
            raise ValueError(
                f"DDS data is {len(data)} bytes, shorter than its {cls.SIZE}-byte header"
            )
        fields = cls._LAYOUT.unpack_from(bytes(data[:cls.SIZE]))
        pixel_format = DdsPixelFormat(*fields[8:16])
        caps, caps2, caps3, caps4, _reserved = fields[16:21]
        return cls(*fields[:8], pixel_format, caps, caps2, caps3, caps4)


def lowest_set_bit(mask: int) -> int:
    """Return the index of the lowest set bit of ``mask`` (0 for an empty mask)."""
    if mask <= 0:
        return 0
    return (mask & -mask).bit_length() - 1


def _magic(data: bytes, offset: int = 0) -> int:
    return int.from_bytes(bytes(data[offset:offset + 4]), "little")


def is_valid_header(data: bytes) -> bool:
    """Return True if ``data`` starts like an image this package can handle."""
    if len(data) < 0x10:
        return False
    fourcc = _magic(data)
    if fourcc == _FCC_PNG or (fourcc & 0xFFFFFF) == _FCC_JPEG:
        return True
    if fourcc == _FCC_RIFF:
        return _magic(data, 8) == _FCC_WEBP
    if fourcc == _FCC_DDS:
        if len(data) < DdsHeader.SIZE:
            return False
        pixel_format = DdsHeader.parse(data).pixel_format
        flags = pixel_format.flags
        bits = pixel_format.rgb_bit_count
        return bool(
            flags & _DDPF_FOURCC
            or (flags & _DDPF_LUMINANCE and bits == 8)
            or (flags & _DDPF_RGB and bits == 32)
        )
    if fourcc in _ATEX_MAGICS:
        return _magic(data, 4) in TextureFormat.__members__.values() and any(
            _magic(data, 4) == member.value for member in TextureFormat
        )
    return False


def uncompressed_atex_size(width: int, height: int, texture_format: int) -> int:
    """Return the byte size of a decompressed ATEX texture of the given format."""
    blocks = ((width + 3) >> 2) * ((height + 3) >> 2)
    if texture_format in _DXT8_FORMATS:
        return blocks * 8
    if texture_format in _DXT16_FORMATS:
        return blocks * 16
    raise ValueError(f"unsupported ATEX texture format 0x{texture_format:08x}")


def _pixel_data(data: bytes, header: DdsHeader) -> bytes:
    pixel_count = header.width * header.height
    size = (pixel_count * header.pixel_format.rgb_bit_count) >> 3
    if len(data) < DdsHeader.SIZE + size:
        raise ValueError("DDS pixel data is truncated")
    return bytes(data[DdsHeader.SIZE:DdsHeader.SIZE + size])


def _read_luminance(data: bytes, header: DdsHeader) -> DecodedImage:
    if header.pixel_format.rgb_bit_count != 8:
        raise ValueError("only 8-bit luminance DDS textures are supported")
    pixels = _pixel_data(data, header)
    rgb = bytes(value for value in pixels for _ in range(3))
    return DecodedImage(header.width, header.height, rgb, None)


def _read_uncompressed(data: bytes, header: DdsHeader) -> DecodedImage:
    pf = header.pixel_format
    if pf.rgb_bit_count != 32:
        raise ValueError("only 32-bit uncompressed DDS textures are supported")
    pixels = _pixel_data(data, header)
    channels = [
        (pf.r_bit_mask, lowest_set_bit(pf.r_bit_mask)),
        (pf.g_bit_mask, lowest_set_bit(pf.g_bit_mask)),
        (pf.b_bit_mask, lowest_set_bit(pf.b_bit_mask)),
    ]
    has_alpha = bool(pf.flags & _DDPF_ALPHAPIXELS)
    alpha_shift = lowest_set_bit(pf.a_bit_mask)
    rgb = bytearray()
    alpha = bytearray()
    for (value,) in struct.iter_unpack("<I", pixels):
        rgb.extend(((value & mask) >> shift) & 0xFF for mask, shift in channels)
        if has_alpha:
            alpha.append(((value & pf.a_bit_mask) >> alpha_shift) & 0xFF)
    return DecodedImage(
        header.width, header.height, bytes(rgb), bytes(alpha) if has_alpha else None
    )


def _read_compressed(data: bytes, header: DdsHeader) -> DecodedImage:
    payload = bytes(data[DdsHeader.SIZE:])
    four_cc = header.pixel_format.four_cc
    if four_cc == TextureFormat.DXT1:
        return decode_dxt1(payload, header.width, header.height)
    if four_cc in (TextureFormat.DXT2, TextureFormat.DXT3):
        return decode_dxt3(payload, header.width, header.height)
    if four_cc in (TextureFormat.DXT4, TextureFormat.DXT5):
        return decode_dxt5(payload, header.width, header.height)
    if four_cc == _FCC_R32F:
        raise ValueError("R32F DDS textures are not supported")
    raise ValueError(f"unsupported DDS compression 0x{four_cc:08x}")


def read_dds(data: bytes) -> DecodedImage:
    """Decode a DDS file into RGB pixels and optional alpha."""
    header = DdsHeader.parse(data)
    if (
        header.magic != _FCC_DDS
        or header.size != DdsHeader.SIZE - 4
        or header.pixel_format.size != DdsPixelFormat.SIZE
    ):
        raise ValueError("not a valid DDS header")
    flags = header.pixel_format.flags
    if flags & _DDPF_RGB:
        return _read_uncompressed(data, header)
    if flags & _DDPF_FOURCC:
        return _read_compressed(data, header)
    if flags & _DDPF_LUMINANCE:
        return _read_luminance(data, header)
    raise ValueError("DDS pixel format is not supported")


_Format = Union[TextureFormat, int]


def decode_atex_buffer(
    texture_format: _Format, buffer: bytes, width: int, height: int
) -> DecodedImage:
    """Decode the decompressed block data of an ATEX texture.

    A 126x64 texture is stored with 128-pixel rows and is decoded at that width.
    """
    if width == 126 and height == 64:
        width = 128
    try:
        fmt = TextureFormat(texture_format)
    except ValueError:
        raise ValueError(
            f"unsupported ATEX texture format 0x{int(texture_format):08x}"
        ) from None
    if fmt == TextureFormat.DXT1:
        return decode_dxt1(buffer, width, height)
    if fmt in (TextureFormat.DXT2, TextureFormat.DXT3, TextureFormat.DXTN):
        return decode_dxt3(buffer, width, height)
    if fmt in (TextureFormat.DXT4, TextureFormat.DXT5):
        return decode_dxt5(buffer, width, height)
    if fmt == TextureFormat.DXTA:
        return decode_dxta(buffer, width, height)
    if fmt == TextureFormat.DXTL:
        return decode_dxtl(buffer, width, height)
    return decode_3dcx(buffer, width, height)