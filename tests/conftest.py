import struct

import numpy as np
import pytest

from WiiU.swizzle import compressed_indices, uncompressed_indices


def pack_color_block(color0, color1, codes):
    bits = 0
    for k, code in enumerate(codes):
        bits |= code << (2 * k)
    return struct.pack('<HHI', color0, color1, bits)


def pack_alpha_block(alpha0, alpha1, codes):
    bits = 0
    for k, code in enumerate(codes):
        bits |= code << (3 * k)
    return bytes([alpha0, alpha1]) + bits.to_bytes(6, 'little')


def tile_rgba8(pattern):
    """Scatter an (h, w, 4) RGBA pattern into tiled source order."""
    height, width = pattern.shape[:2]
    tiled = np.zeros((width * height, 4), dtype=np.uint8)
    tiled[uncompressed_indices(width, height).ravel()] = pattern.reshape(-1, 4)
    return tiled.tobytes()


def tile_blocks(blocks, block_width, block_height):
    """Place blocks[by][bx] at its tiled source position."""
    indices = compressed_indices(block_width, block_height)
    tiled = [b'\x00' * 16] * (block_width * block_height)
    for by in range(block_height):
        for bx in range(block_width):
            tiled[int(indices[by, bx])] = blocks[by][bx]
    return b''.join(tiled)


def gtx_block(block_type, payload, magic=b'BLK{', data_size=None):
    if data_size is None:
        data_size = len(payload)
    return struct.pack('>4s7I', magic, 0x20, 1, 0, block_type, data_size, 0, 0) + payload


def image_info(width, height, texture_format, image_size=0):
    payload = bytearray(0x9C)
    struct.pack_into('>III', payload, 0x00, 1, width, height)
    struct.pack_into('>I', payload, 0x14, texture_format)
    struct.pack_into('>I', payload, 0x20, image_size)
    return bytes(payload)


def gtx_file(*blocks):
    header = struct.pack('>4s7I', b'Gfx2', 0x20, 7, 1, 2, 1, 0, 0)
    return header + b''.join(blocks)


def rgba8_pattern(width, height):
    ys, xs = np.mgrid[0:height, 0:width]
    return np.stack([
        (xs * 4) & 0xFF,
        (ys * 4) & 0xFF,
        (xs ^ ys) & 0xFF,
        255 - (ys & 0x7F),
    ], axis=-1).astype(np.uint8)


@pytest.fixture
def pattern_gtx(tmp_path):
    """Write a 64x64 R8G8B8A8 GTX file and return (path, pattern)."""
    def make(width=64, height=64, declared=None, texture_format=0x1A):
        pattern = rgba8_pattern(width, height)
        declared_width, declared_height = declared or (width, height)
        data = gtx_file(
            gtx_block(0x0B, image_info(declared_width, declared_height, texture_format, width * height * 4)),
            gtx_block(0x0C, tile_rgba8(pattern)),
            gtx_block(0x01, b''),
        )
        path = tmp_path / "pattern.gtx"
        path.write_bytes(data)
        return path, pattern
    return make
