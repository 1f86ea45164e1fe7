# WiiU/bmp_writer.py
import struct

BMP_HEADER_SIZE = 122
V4_HEADER_SIZE = 108
BI_BITFIELDS = 3
PIXELS_PER_METER = 2835
LCS_WINDOWS_COLOR_SPACE = 0x57696E20  # 'Win '

def bmp_header(width, height):
    image_size = width * height * 4
    header = bytearray(BMP_HEADER_SIZE)
    struct.pack_into('<2sIHHI', header, 0, b'BM', BMP_HEADER_SIZE + image_size, 0, 0, BMP_HEADER_SIZE)
    struct.pack_into(
        '<IiiHHIIiiII', header, 14,
        V4_HEADER_SIZE, width, height, 1, 32, BI_BITFIELDS, image_size,
        PIXELS_PER_METER, PIXELS_PER_METER, 0, 0,
    )
    # channel masks, then colour space; endpoints and gamma stay zero
    struct.pack_into('<IIIII', header, 54, 0x00FF0000, 0x0000FF00, 0x000000FF, 0xFF000000, LCS_WINDOWS_COLOR_SPACE)
    return bytes(header)

def write_bmp(f, raster):
    """Write a RasterBuffer as a bottom-up 32-bit BMP."""
    f.write(bmp_header(raster.width, raster.height))
    bgra = raster.pixels[..., [2, 1, 0, 3]]
    for row in range(raster.height - 1, -1, -1):
        f.write(bgra[row].tobytes())

def save_bmp(path, raster):
    with open(path, 'wb') as f:
        write_bmp(f, raster)
