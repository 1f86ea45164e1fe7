# WiiU/wiiu_texture_decoder.py
from collections import namedtuple
from enum import IntEnum

import numpy as np
from PIL import Image

from texture_decoder import TextureDecoder
from WiiU.byte_utils import argb_to_rgba, read_u32_be, swap_rb
from WiiU.dxt_codec import DXT5_BLOCK_SIZE, decode_dxt5_block
from WiiU.swizzle import TILE_GRANULARITY, compressed_indices, uncompressed_indices


class PixelFormat(IntEnum):
    R8G8B8A8 = 0x1A
    DXT5 = 0x33


# bytes per unit, unit edge in pixels, tiling granularity
FormatInfo = namedtuple('FormatInfo', 'unit_size block_edge granularity')

FORMAT_INFO = {
    PixelFormat.R8G8B8A8: FormatInfo(4, 1, TILE_GRANULARITY),
    PixelFormat.DXT5: FormatInfo(DXT5_BLOCK_SIZE, 4, TILE_GRANULARITY),
}

TextureDescriptor = namedtuple('TextureDescriptor', 'width height format raw')


class DecodeError(Exception):
    pass


class UnsupportedFormat(DecodeError):
    def __init__(self, format_code):
        super().__init__(f"Unsupported texture format 0x{format_code:X}")
        self.format_code = format_code


class BufferTooSmall(DecodeError):
    def __init__(self, required, actual):
        super().__init__(f"Texture data too small: need {required} bytes, got {actual}")
        self.required = required
        self.actual = actual


class AddressOutOfRange(DecodeError):
    """The tiling mapper pointed past the end of the supplied texture data.

    Raised instead of guessing when a surface size falls outside the
    dimensions the mapping is known to handle.
    """
    def __init__(self, index, limit):
        super().__init__(f"Swizzled index {index} outside the {limit} units of texture data")
        self.index = index
        self.limit = limit


class RasterBuffer:
    """Linear RGBA8 pixels, top row first."""

    def __init__(self, width, height, pixels):
        self.width = width
        self.height = height
        self.pixels = pixels

    def tobytes(self):
        return self.pixels.tobytes()

    def row(self, y):
        return self.pixels[y].tobytes()

    def crop(self, width, height):
        width = min(width, self.width)
        height = min(height, self.height)
        return RasterBuffer(width, height, np.ascontiguousarray(self.pixels[:height, :width]))

    def to_image(self):
        return Image.fromarray(self.pixels)


def is_supported(format_code):
    return format_code in FORMAT_INFO


def required_size(width, height, format_code):
    info = FORMAT_INFO[format_code]
    units = (width // info.block_edge) * (height // info.block_edge)
    return units * info.unit_size


def _check_indices(indices, limit):
    """Raise unless every mapped index addresses a unit present in the data."""
    if indices.size == 0:
        return
    highest = int(indices.max())
    if highest >= limit:
        raise AddressOutOfRange(highest, limit)


def _decode_rgba8(width, height, raw):
    limit = len(raw) // 4
    indices = uncompressed_indices(width, height)
    _check_indices(indices, limit)
    words = np.frombuffer(raw, dtype='<u4', count=limit).astype(np.uint32)
    argb = swap_rb(words[indices])
    pixels = np.stack(argb_to_rgba(argb), axis=-1).astype(np.uint8)
    return RasterBuffer(width, height, pixels)


def _decode_dxt5(width, height, raw):
    block_width = width // 4
    block_height = height // 4
    indices = compressed_indices(block_width, block_height)
    _check_indices(indices, len(raw) // DXT5_BLOCK_SIZE)
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    for by in range(block_height):
        for bx in range(block_width):
            offset = int(indices[by, bx]) * DXT5_BLOCK_SIZE
            texels = decode_dxt5_block(raw[offset:offset + DXT5_BLOCK_SIZE])
            pixels[by * 4:by * 4 + 4, bx * 4:bx * 4 + 4] = np.array(texels, dtype=np.uint8).reshape(4, 4, 4)
    return RasterBuffer(width, height, pixels)


DECODERS = {
    PixelFormat.R8G8B8A8: _decode_rgba8,
    PixelFormat.DXT5: _decode_dxt5,
}


def decode(texture):
    """Untile and decompress a TextureDescriptor into a RasterBuffer.

    Width and height must already be padded to the tiling granularity.
    Raises a DecodeError before reading any texel data if the format is
    unknown, the buffer cannot hold the declared surface, or the tiling
    maps a pixel past the end of the supplied data. Bytes beyond the
    declared surface stay addressable, as the tiled layout may reach them.
    """
    if not is_supported(texture.format):
        raise UnsupportedFormat(texture.format)
    required = required_size(texture.width, texture.height, texture.format)
    if len(texture.raw) < required:
        raise BufferTooSmall(required, len(texture.raw))
    if texture.width == 0 or texture.height == 0:
        return RasterBuffer(texture.width, texture.height, np.zeros((texture.height, texture.width, 4), dtype=np.uint8))
    return DECODERS[texture.format](texture.width, texture.height, bytes(texture.raw))


def pad_dimension(value, granularity=TILE_GRANULARITY):
    return (value + granularity - 1) & ~(granularity - 1)


class WiiUTextureDecoder(TextureDecoder):
    OFFSET_WIDTH = 0x04
    OFFSET_HEIGHT = 0x08
    OFFSET_FORMAT = 0x14
    HEADER_MIN_LENGTH = 0x18

    def parse_texture_header(self, data):
        if len(data) >= self.HEADER_MIN_LENGTH:
            width = read_u32_be(data, self.OFFSET_WIDTH)
            height = read_u32_be(data, self.OFFSET_HEIGHT)
            texture_format = read_u32_be(data, self.OFFSET_FORMAT)
            return width, height, texture_format
        return 0, 0, 0

    def supports(self, texture_format):
        return is_supported(texture_format)

    def decode_texture(self, texture_data, width, height, texture_format):
        info = FORMAT_INFO.get(texture_format)
        granularity = info.granularity if info else TILE_GRANULARITY
        texture = TextureDescriptor(
            pad_dimension(width, granularity),
            pad_dimension(height, granularity),
            texture_format,
            texture_data,
        )
        return decode(texture).to_image()

    @staticmethod
    def format_name(texture_format):
        try:
            return PixelFormat(texture_format).name
        except ValueError:
            return f"Unknown (0x{texture_format:X})"
