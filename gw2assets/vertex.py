"""Flexible vertex formats and the raw vertex and index buffers of models."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntFlag
from typing import List, Tuple, Union

Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]

# Only the lowest seven bits of each UV field name a texture coordinate set.
_UV_SETS = 7


class VertexFormat(IntFlag):
    """Bits describing which attributes a vertex carries, in storage order."""

    POSITION = 0x00000001
    WEIGHTS = 0x00000002
    GROUP = 0x00000004
    NORMAL = 0x00000008
    COLOR = 0x00000010
    TANGENT = 0x00000020
    BITANGENT = 0x00000040
    TANGENT_FRAME = 0x00000080
    UV32_MASK = 0x0000FF00
    UV16_MASK = 0x00FF0000
    UNKNOWN1 = 0x01000000
    UNKNOWN2 = 0x02000000
    UNKNOWN3 = 0x04000000
    UNKNOWN4 = 0x08000000
    POSITION_COMPRESSED = 0x10000000
    UNKNOWN5 = 0x20000000


_FormatLike = Union[VertexFormat, int]

# Fixed-size attributes in storage order: (flag, byte size).
_FIXED_BEFORE_UV = (
    (VertexFormat.POSITION, 12),
    (VertexFormat.WEIGHTS, 4),
    (VertexFormat.GROUP, 4),
    (VertexFormat.NORMAL, 12),
    (VertexFormat.COLOR, 4),
    (VertexFormat.TANGENT, 12),
    (VertexFormat.BITANGENT, 12),
    (VertexFormat.TANGENT_FRAME, 12),
)
_FIXED_AFTER_UV = (
    (VertexFormat.UNKNOWN1, 48),
    (VertexFormat.UNKNOWN2, 4),
    (VertexFormat.UNKNOWN3, 4),
    (VertexFormat.UNKNOWN4, 16),
    (VertexFormat.POSITION_COMPRESSED, 6),
    (VertexFormat.UNKNOWN5, 12),
)
_UV32_SIZE = 8
_UV16_SIZE = 4


@dataclass
class Vertex:
    """A vertex with position, normal and one set of texture coordinates."""

    position: Vec3 = (0.0, 0.0, 0.0)
    normal: Vec3 = (0.0, 0.0, 0.0)
    uv: Vec2 = (0.0, 0.0)


@dataclass(frozen=True)
class Triangle:
    """Three vertex indices forming one face."""

    index1: int
    index2: int
    index3: int

    @property
    def indices(self) -> Tuple[int, int, int]:
        """The three indices in order."""
        return self.index1, self.index2, self.index3


def _uv_set_count(vertex_format: int, mask: int) -> int:
    field = (vertex_format & mask) >> ((mask & -mask).bit_length() - 1)
    return bin(field & ((1 << _UV_SETS) - 1)).count("1")


def has_normal(vertex_format: _FormatLike) -> bool:
    """Return True if the format stores a normal."""
    return bool(int(vertex_format) & VertexFormat.NORMAL)


def has_uv(vertex_format: _FormatLike) -> bool:
    """Return True if the format stores any texture coordinates."""
    return bool(int(vertex_format) & (VertexFormat.UV32_MASK | VertexFormat.UV16_MASK))


def vertex_size(vertex_format: _FormatLike) -> int:
    """Return the number of bytes one vertex of ``vertex_format`` occupies."""
    fmt = int(vertex_format)
    size = sum(n for flag, n in _FIXED_BEFORE_UV if fmt & flag)
    size += _uv_set_count(fmt, VertexFormat.UV32_MASK) * _UV32_SIZE
    size += _uv_set_count(fmt, VertexFormat.UV16_MASK) * _UV16_SIZE
    size += sum(n for flag, n in _FIXED_AFTER_UV if fmt & flag)
    return size


def _read_vertex(data: bytes, pos: int, fmt: int) -> Vertex:
    vertex = Vertex()
    if fmt & VertexFormat.POSITION:
        vertex.position = struct.unpack_from("<3f", data, pos)
        pos += 12
    if fmt & VertexFormat.WEIGHTS:
        pos += 4
    if fmt & VertexFormat.GROUP:
        pos += 4
    if fmt & VertexFormat.NORMAL:
        vertex.normal = struct.unpack_from("<3f", data, pos)
        pos += 12
    if fmt & VertexFormat.COLOR:
        pos += 4
    for flag in (VertexFormat.TANGENT, VertexFormat.BITANGENT, VertexFormat.TANGENT_FRAME):
        if fmt & flag:
            pos += 12

    # Every 32-bit set overwrites the coordinates; the last one is kept.
    for _ in range(_uv_set_count(fmt, VertexFormat.UV32_MASK)):
        vertex.uv = struct.unpack_from("<2f", data, pos)
        pos += _UV32_SIZE
    # Of the 16-bit sets only the first is used, and it takes precedence.
    for set_index in range(_uv_set_count(fmt, VertexFormat.UV16_MASK)):
        if set_index == 0:
            vertex.uv = struct.unpack_from("<2e", data, pos)
        pos += _UV16_SIZE

    for flag, n in _FIXED_AFTER_UV:
        if not fmt & flag:
            continue
        if flag == VertexFormat.POSITION_COMPRESSED:
            vertex.position = struct.unpack_from("<3e", data, pos)
        pos += n
    return vertex


def read_vertex_buffer(
    data: bytes, vertex_count: int, vertex_format: _FormatLike
) -> List[Vertex]:
    """Decode ``vertex_count`` vertices stored in ``vertex_format``.

    Attributes the format lacks are left at zero; skipped attributes are ignored.
    """
    data = bytes(data)
    fmt = int(vertex_format)
    if vertex_count < 0:
        raise ValueError("vertex count must not be negative")
    stride = vertex_size(fmt)
    needed = stride * vertex_count
    if len(data) < needed:
        raise ValueError(
            f"vertex buffer is {len(data)} bytes, {needed} needed for "
            f"{vertex_count} vertices of {stride} bytes"
        )
    return [_read_vertex(data, i * stride, fmt) for i in range(vertex_count)]


def read_index_buffer(data: bytes, index_count: int) -> List[Triangle]:
    """Decode 16-bit triangle indices, flipping the winding of every face."""
    data = bytes(data)
    if index_count < 0:
        raise ValueError("index count must not be negative")
    triangle_count = index_count // 3
    needed = triangle_count * 6
    if len(data) < needed:
        raise ValueError(
            f"index buffer is {len(data)} bytes, {needed} needed for "
            f"{triangle_count} triangles"
        )
    return [
        Triangle(a, c, b)
        for a, b, c in struct.iter_unpack("<3H", data[:needed])
    ]