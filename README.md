# gw2assets

Pure-Python decoders for asset formats found in game archives. The package
has no runtime dependencies.

## Modules

### `gw2assets.dxt` — block-compressed textures

Each decoder takes the raw block data, a width and a height, and returns a
`DecodedImage` with `width`, `height`, packed 24-bit `rgb` bytes and an
optional 8-bit `alpha` channel. `DecodedImage.pixel(x, y)` returns one
`(r, g, b)` colour. Only whole 4x4 blocks are decoded; a `ValueError` is
raised if the data is too short for the requested size.

- `decode_dxt1` — DXT1 (BC1), with one-bit alpha.
- `decode_dxt3` — DXT2/DXT3 (BC2), with explicit four-bit alpha.
- `decode_dxt5` — DXT4/DXT5 (BC3), with interpolated alpha.
- `decode_dxta` — single-channel data, returned as a grey image without alpha.
- `decode_dxtl` — DXT5 colours premultiplied by their alpha.
- `decode_3dcx` — two-channel normal maps; the third component is rebuilt,
  green is inverted, and there is no alpha.

The helpers `interpolate_alpha(alpha0, alpha1)` and
`decode_dxt_palette(color0, color1, is_dxt1)` return the eight-entry
interpolated palette and the four block colours (with their alphas).

### `gw2assets.image` — DDS and ATEX textures

- `is_valid_header(data)` — recognises PNG, JPEG, WebP (RIFF/WEBP), DDS
  headers this package can decode, and ATEX-family headers (`ATEX`, `ATTX`,
  `ATEP`, `ATEU`, `ATEC`, `ATET`) whose compression is a `TextureFormat`.
- `read_dds(data)` — decodes a DDS file: 32-bit uncompressed RGB(A) using the
  header's bit masks, 8-bit luminance, or DXT1/DXT2/DXT3/DXT4/DXT5. Other
  layouts raise `ValueError`.
- `DdsHeader.parse(data)` — reads the 128-byte header, including its
  `DdsPixelFormat`.
- `uncompressed_atex_size(width, height, texture_format)` — byte size of the
  decompressed block data; `ValueError` for unknown formats.
- `decode_atex_buffer(texture_format, buffer, width, height)` — decodes
  already-decompressed ATEX block data with the matching `gw2assets.dxt`
  decoder. A 126x64 texture is decoded at a width of 128.
- `TextureFormat` — the supported four-character compression codes.
- `lowest_set_bit(mask)` — index of the lowest set bit (0 for an empty mask).

### `gw2assets.vertex` — model vertex and index buffers

- `VertexFormat` — flags naming the attributes a vertex carries.
- `vertex_size(vertex_format)` — bytes per vertex.
- `read_vertex_buffer(data, vertex_count, vertex_format)` — returns a list of
  `Vertex` records (`position`, `normal`, `uv`). Positions come from full or
  half-precision fields; among 32-bit UV sets the last one is kept, and the
  first 16-bit UV set takes precedence over them. Other attributes are
  skipped.
- `read_index_buffer(data, index_count)` — reads 16-bit indices into
  `Triangle` records, flipping the winding of every face.
- `has_normal(vertex_format)`, `has_uv(vertex_format)` — attribute checks.

### `gw2assets.text` — text and sound resources

- `printable_text(data)` — the 7-bit ASCII bytes of `data` as a string;
  bytes of 0x80 and above are dropped.
- `strip_asnd_header(data)` — removes the 36-byte header from packed MP3
  sound data; `ValueError` if the data is shorter than that.
- `is_strings_header(data)` — whether `data` starts with the `strs` magic.

## What the package does not do

- It does not open game archives or decompress ATEX payloads;
  `decode_atex_buffer` expects block data that is already decompressed.
- PNG, JPEG and WebP files are only recognised by `is_valid_header`, not
  decoded.
- It does not decode bitmap fonts, assemble meshes into models, compute
  bounds or normals, or read materials.
- It has no command-line program or viewer.

## Examples

```python
from gw2assets.dxt import decode_dxt1

image = decode_dxt1(block_bytes, 64, 64)
r, g, b = image.pixel(0, 0)
```

```python
from gw2assets.image import is_valid_header, read_dds

with open("texture.dds", "rb") as handle:
    data = handle.read()

if is_valid_header(data):
    image = read_dds(data)
```

```python
from gw2assets.vertex import VertexFormat, read_index_buffer, read_vertex_buffer

fmt = VertexFormat.POSITION | VertexFormat.NORMAL
vertices = read_vertex_buffer(vertex_bytes, vertex_count, fmt)
triangles = read_index_buffer(index_bytes, index_count)
```

```python
from gw2assets.text import printable_text, strip_asnd_header

text = printable_text(raw_bytes)
mp3 = strip_asnd_header(asnd_bytes)
```

## Installation

```
pip install .
```

## Running the tests

```
pip install .[test]
pytest
```