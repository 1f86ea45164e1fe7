# WiiU/swizzle.py
"""Wii U surface tiling, recovered from sample textures.

The two mappers below are fixed bit permutations, not a derivable formula.
Every operation is a plain integer operator so the same code runs on Python
ints and on numpy integer arrays.

The compressed mapper only forms a permutation when the block width is a
multiple of 32 (texture width a multiple of 128). Narrower textures can
produce indices past the end of the surface.
"""
import numpy as np

TILE_GRANULARITY = 64

def map_uncompressed(x, y, width):
    """Return the source texel index of destination pixel (x, y)."""
    pos = (y & ~15) * width
    pos ^= x & 3
    pos ^= ((x >> 2) & 1) << 3
    pos ^= ((x >> 3) & 1) << 6
    pos ^= ((x >> 3) & 1) << 7
    pos ^= (x & ~0xF) << 4
    pos ^= (y & 1) << 2
    pos ^= ((y >> 1) & 7) << 4
    pos ^= (y & 0x10) << 4
    pos ^= (y & 0x20) << 2
    return pos

def map_compressed(block_x, block_y, block_width):
    """Return the source block index of destination 4x4 block (block_x, block_y)."""
    x, y = block_x, block_y
    pos = (y >> 4) * (block_width * 16)
    pos ^= y & 1
    pos ^= (x & 7) << 1
    pos ^= (x & 8) << 1
    pos ^= (x & 8) << 2
    pos ^= (x & 0x10) << 2
    pos ^= (x & ~0x1F) << 4
    # Wider than a 32x32 block tile needs; only verified on 512x320 and 2048x512.
    pos ^= (y & 2) << 6
    pos ^= (y & 4) << 6
    pos ^= (y & 8) << 1
    pos ^= (y & 0x10) << 2
    pos ^= y & 0x20
    return pos

def _grid(width, height):
    ys, xs = np.mgrid[0:height, 0:width]
    return xs.astype(np.int64), ys.astype(np.int64)

def uncompressed_indices(width, height):
    xs, ys = _grid(width, height)
    return map_uncompressed(xs, ys, width)

def compressed_indices(block_width, block_height):
    xs, ys = _grid(block_width, block_height)
    return map_compressed(xs, ys, block_width)
