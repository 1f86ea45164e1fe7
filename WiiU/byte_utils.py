# WiiU/byte_utils.py
import struct

def swap32(value):
    a = (value & 0xFF000000) >> 24
    b = (value & 0x00FF0000) >> 8
    c = (value & 0x0000FF00) << 8
    d = (value & 0x000000FF) << 24
    return a | b | c | d

def swap_rb(argb):
    """Exchange the red and blue bytes of a 32-bit word, keeping alpha and green."""
    r = (argb & 0x00FF0000) >> 16
    b = (argb & 0x000000FF) << 16
    ag = argb & 0xFF00FF00
    return ag | r | b

def argb_to_rgba(argb):
    return (
        (argb >> 16) & 0xFF,
        (argb >> 8) & 0xFF,
        argb & 0xFF,
        (argb >> 24) & 0xFF,
    )

def read_u32_be(data, offset=0):
    return struct.unpack_from('>I', data, offset)[0]

def read_u16_le(data, offset=0):
    return struct.unpack_from('<H', data, offset)[0]
