"""Decoders for DXT-family block-compressed textures."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

Color = Tuple[int, int, int]

_DXT1_BLOCK_SIZE = 8
_DXT3_BLOCK_SIZE = 16
_DXTA_BLOCK_SIZE = 8
_3DCX_BLOCK_SIZE = 16

_FLOAT_TO_BYTE = 127.5


@dataclass
class DecodedImage:
    """A decoded texture: packed 24-bit RGB pixels and optional 8-bit alpha."""

    width: int
    height: int
    rgb: bytes
    alpha: Optional[bytes] = None

    def pixel(self, x: int, y: int) -> Color:
        """Return the (r, g, b) colour at column ``x`` of row ``y``."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) is outside the image")
        start = (y * self.width + x) * 3
        r, g, b = self.rgb[start:start + 3]
        return r, g, b


def _f32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


_BYTE_TO_FLOAT = _f32(1.0 / _f32(_FLOAT_TO_BYTE))


def _expand5(value: int) -> int:
    return ((value << 3) | (value >> 2)) & 0xFF


def _expand6(value: int) -> int:
    return ((value << 2) | (value >> 4)) & 0xFF


def _rgb565(color: int) -> Color:
    return (
        _expand5((color >> 11) & 0x1F),
        _expand6((color >> 5) & 0x3F),
        _expand5(color & 0x1F),
    )


def interpolate_alpha(alpha0: int, alpha1: int) -> List[int]:
    """Return the eight-entry palette used by DXT5-style interpolated channels."""
    values = [alpha0, alpha1]
    if alpha0 > alpha1:
        values.extend(((8 - i) * alpha0 + (i - 1) * alpha1) // 7 for i in range(2, 8))
    else:
        values.extend(((6 - i) * alpha0 + (i - 1) * alpha1) // 5 for i in range(2, 6))
        values.extend((0x00, 0xFF))
    return values


def decode_dxt_palette(
    color0: int, color1: int, is_dxt1: bool
) -> Tuple[List[Color], Tuple[int, int, int, int]]:
    """Return the four block colours and their alphas for two RGB565 endpoints.

    Only DXT1 blocks with ``color0 <= color1`` use the three-colour mode in
    which the last entry is transparent black.
    """
    c0 = _rgb565(color0)
    c1 = _rgb565(color1)
    if not is_dxt1 or color0 > color1:
        c2 = tuple((a * 2 + b) // 3 for a, b in zip(c0, c1))
        c3 = tuple((a + b * 2) // 3 for a, b in zip(c0, c1))
        alphas = (0xFF, 0xFF, 0xFF, 0xFF)
    else:
        c2 = tuple((a + b) >> 1 for a, b in zip(c0, c1))
        c3 = (0, 0, 0)
        alphas = (0xFF, 0xFF, 0xFF, 0x00)
    return [c0, c1, c2, c3], alphas  # type: ignore[list-item]


def _blocks(
    data: bytes, width: int, height: int, block_size: int
) -> Iterator[Tuple[int, int, bytes]]:
    if width < 0 or height < 0:
        raise ValueError("image dimensions must not be negative")
    horizontal = width >> 2
    vertical = height >> 2
    needed = horizontal * vertical * block_size
    if len(data) < needed:
        raise ValueError(
            f"texture data is {len(data)} bytes, {needed} needed for "
            f"a {width}x{height} image"
        )
    offset = 0
    for block_y in range(vertical):
        for block_x in range(horizontal):
            yield block_x * 4, block_y * 4, data[offset:offset + block_size]
            offset += block_size


def _pixel_offsets(block_x: int, block_y: int, width: int) -> Iterator[int]:
    for y in range(4):
        row = (block_y + y) * width + block_x
        yield from range(row, row + 4)


def _put(rgb: bytearray, index: int, color: Sequence[int]) -> None:
    rgb[index * 3:index * 3 + 3] = bytes(color)


def decode_dxt1(data: bytes, width: int, height: int) -> DecodedImage:
    """Decode DXT1 (BC1) data, with one-bit alpha."""
    data = bytes(data)
    rgb = bytearray(width * height * 3)
    alpha = bytearray(width * height)
    for bx, by, block in _blocks(data, width, height, _DXT1_BLOCK_SIZE):
        color0, color1, indices = struct.unpack_from("<HHI", block)
        colors, alphas = decode_dxt_palette(color0, color1, True)
        for pixel in _pixel_offsets(bx, by, width):
            index = indices & 3
            _put(rgb, pixel, colors[index])
            alpha[pixel] = alphas[index]
            indices >>= 2
    return DecodedImage(width, height, bytes(rgb), bytes(alpha))


def decode_dxt3(data: bytes, width: int, height: int) -> DecodedImage:
    """Decode DXT2/DXT3 (BC2) data, with explicit four-bit alpha."""
    data = bytes(data)
    rgb = bytearray(width * height * 3)
    alpha = bytearray(width * height)
    for bx, by, block in _blocks(data, width, height, _DXT3_BLOCK_SIZE):
        block_alpha, color0, color1, indices = struct.unpack_from("<QHHI", block)
        colors, _ = decode_dxt_palette(color0, color1, False)
        for pixel in _pixel_offsets(bx, by, width):
            _put(rgb, pixel, colors[indices & 3])
            nibble = block_alpha & 0xF
            alpha[pixel] = (nibble << 4) | nibble
            indices >>= 2
            block_alpha >>= 4
    return DecodedImage(width, height, bytes(rgb), bytes(alpha))


def decode_dxt5(data: bytes, width: int, height: int) -> DecodedImage:
    """Decode DXT4/DXT5 (BC3) data, with interpolated alpha."""
    data = bytes(data)
    rgb = bytearray(width * height * 3)
    alpha = bytearray(width * height)
    for bx, by, block in _blocks(data, width, height, _DXT3_BLOCK_SIZE):
        block_alpha, color0, color1, indices = struct.unpack_from("<QHHI", block)
        colors, _ = decode_dxt_palette(color0, color1, False)
        alphas = interpolate_alpha(block_alpha & 0xFF, (block_alpha >> 8) & 0xFF)
        block_alpha >>= 16
        for pixel in _pixel_offsets(bx, by, width):
            _put(rgb, pixel, colors[indices & 3])
            alpha[pixel] = alphas[block_alpha & 7]
            indices >>= 2
            block_alpha >>= 3
    return DecodedImage(width, height, bytes(rgb), bytes(alpha))


def decode_dxta(data: bytes, width: int, height: int) -> DecodedImage:
    """Decode single-channel DXTA data as a grey image without alpha."""
    data = bytes(data)
    rgb = bytearray(width * height * 3)
    for bx, by, block in _blocks(data, width, height, _DXTA_BLOCK_SIZE):
        (bits,) = struct.unpack_from("<Q", block)
        levels = interpolate_alpha(bits & 0xFF, (bits >> 8) & 0xFF)
        bits >>= 16
        for pixel in _pixel_offsets(bx, by, width):
            level = levels[bits & 7]
            _put(rgb, pixel, (level, level, level))
            bits >>= 3
    return DecodedImage(width, height, bytes(rgb), None)


def decode_dxtl(data: bytes, width: int, height: int) -> DecodedImage:
    """Decode DXTL data: DXT5 colours premultiplied by their alpha."""
    image = decode_dxt5(data, width, height)
    alpha = image.alpha or b""
    rgb = bytearray(image.rgb)
    for pixel, a in enumerate(alpha):
        start = pixel * 3
        rgb[start:start + 3] = bytes((c * a) // 0xFF for c in rgb[start:start + 3])
    return DecodedImage(width, height, bytes(rgb), image.alpha)


def _normal_component(value: int) -> float:
    return _f32(_f32(value * _BYTE_TO_FLOAT) - 1.0)


def _to_byte(value: float) -> int:
    scaled = _f32(_f32(value + 1.0) * _FLOAT_TO_BYTE)
    return min(max(int(scaled), 0), 0xFF)


def decode_3dcx(data: bytes, width: int, height: int) -> DecodedImage:
    """Decode a two-channel 3DCX normal map, rebuilding the third component.

    The green channel is inverted; the image has no alpha.
    """
    data = bytes(data)
    rgb = bytearray(width * height * 3)
    for bx, by, block in _blocks(data, width, height, _3DCX_BLOCK_SIZE):
        green, red = struct.unpack_from("<QQ", block)
        reds = interpolate_alpha(red & 0xFF, (red >> 8) & 0xFF)
        greens = interpolate_alpha(green & 0xFF, (green >> 8) & 0xFF)
        red >>= 16
        green >>= 16
        for pixel in _pixel_offsets(bx, by, width):
            nr = _normal_component(reds[red & 7])
            ng = _normal_component(greens[green & 7])
            remainder = _f32(_f32(1.0 - _f32(nr * nr)) - _f32(ng * ng))
            nb = _f32(math.sqrt(max(remainder, 0.0)))
            _put(rgb, pixel, (_to_byte(nr), 0xFF - _to_byte(ng), _to_byte(nb)))
            red >>= 3
            green >>= 3
    return DecodedImage(width, height, bytes(rgb), None)