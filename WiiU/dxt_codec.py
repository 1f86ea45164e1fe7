# WiiU/dxt_codec.py
"""S3TC block decoding (DXT1 color sub-blocks and DXT5 alpha sub-blocks).

Texel (i, j) is column i, row j inside the 4x4 block. Blends truncate.
"""
from WiiU.byte_utils import read_u16_le

COLOR_OPAQUE = 0
COLOR_PUNCH_THROUGH = 1
COLOR_WITH_ALPHA_BLOCK = 2

COLOR_BLOCK_SIZE = 8
ALPHA_BLOCK_SIZE = 8
DXT5_BLOCK_SIZE = ALPHA_BLOCK_SIZE + COLOR_BLOCK_SIZE

def exp5to8r(packed):
    return ((packed >> 8) & 0xF8) | ((packed >> 13) & 0x7)

def exp6to8g(packed):
    return ((packed >> 3) & 0xFC) | ((packed >> 9) & 0x3)

def exp5to8b(packed):
    return ((packed << 3) & 0xF8) | ((packed >> 2) & 0x7)

def unpack_rgb565(packed):
    return (exp5to8r(packed), exp6to8g(packed), exp5to8b(packed))

def color_palette(block, mode=COLOR_OPAQUE):
    """Return the four RGBA entries addressed by the 2-bit color codes."""
    color0 = read_u16_le(block, 0)
    color1 = read_u16_le(block, 2)
    rgb0 = unpack_rgb565(color0)
    rgb1 = unpack_rgb565(color1)

    if color0 > color1:
        rgb2 = tuple((c0 * 2 + c1) // 3 for c0, c1 in zip(rgb0, rgb1))
    else:
        rgb2 = tuple((c0 + c1) // 2 for c0, c1 in zip(rgb0, rgb1))

    if mode == COLOR_WITH_ALPHA_BLOCK or color0 > color1:
        rgba3 = tuple((c0 + c1 * 2) // 3 for c0, c1 in zip(rgb0, rgb1)) + (255,)
    elif mode == COLOR_PUNCH_THROUGH:
        rgba3 = (0, 0, 0, 0)
    else:
        rgba3 = (0, 0, 0, 255)

    return [rgb0 + (255,), rgb1 + (255,), rgb2 + (255,), rgba3]

def color_code(block, i, j):
    bits = block[4] | (block[5] << 8) | (block[6] << 16) | (block[7] << 24)
    return (bits >> (2 * (j * 4 + i))) & 3

def decode_color_texel(block, i, j, mode=COLOR_OPAQUE):
    return color_palette(block, mode)[color_code(block, i, j)]

def decode_color_block(block, mode=COLOR_OPAQUE):
    palette = color_palette(block, mode)
    return [palette[color_code(block, i, j)] for j in range(4) for i in range(4)]

def alpha_code(block, i, j):
    """Reassemble the 3-bit alpha selector of texel (i, j).

    Selectors are packed LSB first over bytes 2..7, so a selector starting at
    bit 6 or 7 of a byte continues in the next one.
    """
    bit_pos = (j * 4 + i) * 3
    byte_pos = 2 + bit_pos // 8
    shift = bit_pos & 7
    code = block[byte_pos] >> shift
    if shift > 5:
        code |= block[byte_pos + 1] << (8 - shift)
    return code & 7

def interpolate_alpha(alpha0, alpha1, code):
    if code == 0:
        return alpha0
    if code == 1:
        return alpha1
    if alpha0 > alpha1:
        return (alpha0 * (8 - code) + alpha1 * (code - 1)) // 7
    if code < 6:
        return (alpha0 * (6 - code) + alpha1 * (code - 1)) // 5
    if code == 6:
        return 0
    return 255

def decode_alpha_texel(block, i, j):
    return interpolate_alpha(block[0], block[1], alpha_code(block, i, j))

def decode_alpha_block(block):
    palette = [interpolate_alpha(block[0], block[1], code) for code in range(8)]
    return [palette[alpha_code(block, i, j)] for j in range(4) for i in range(4)]

def decode_dxt5_texel(block, i, j):
    r, g, b, _ = decode_color_texel(block[ALPHA_BLOCK_SIZE:DXT5_BLOCK_SIZE], i, j, COLOR_WITH_ALPHA_BLOCK)
    return (r, g, b, decode_alpha_texel(block, i, j))

def decode_dxt5_block(block):
    """Decode a 16-byte DXT5 block into 16 RGBA texels, row by row."""
    alphas = decode_alpha_block(block)
    colors = decode_color_block(block[ALPHA_BLOCK_SIZE:DXT5_BLOCK_SIZE], COLOR_WITH_ALPHA_BLOCK)
    return [color[:3] + (alpha,) for color, alpha in zip(colors, alphas)]
