# WiiU/gtx_reader.py
import struct
from collections import namedtuple

from WiiU.wiiu_texture_decoder import TextureDescriptor, pad_dimension

GFX2_MAGIC = b'Gfx2'
BLOCK_MAGIC = b'BLK{'
FILE_HEADER_SIZE = 0x20
BLOCK_HEADER_SIZE = 0x20

BLOCK_TYPE_IMAGE_INFO = 0x0B
BLOCK_TYPE_IMAGE_DATA = 0x0C
IMAGE_INFO_SIZE = 0x9C

OFFSET_WIDTH = 0x04
OFFSET_HEIGHT = 0x08
OFFSET_FORMAT = 0x14
OFFSET_IMAGE_SIZE = 0x20

BLOCK_TYPE_NAMES = {
    0x01: "End of File",
    0x02: "Padding",
    0x0B: "Image Info",
    0x0C: "Image Data",
    0x0D: "Mip Data",
}

GTXBlock = namedtuple('GTXBlock', 'block_type data_size data offset header')
BlockHeader = namedtuple('BlockHeader', 'magic header_size major minor block_type data_size block_id index')


class GTXError(Exception):
    pass


class GTXTexture(namedtuple('GTXTexture', 'width height format data_size data image_size')):
    __slots__ = ()

    @property
    def padded_width(self):
        return pad_dimension(self.width)

    @property
    def padded_height(self):
        return pad_dimension(self.height)

    def to_descriptor(self, pad=True):
        if pad:
            return TextureDescriptor(self.padded_width, self.padded_height, self.format, self.data)
        return TextureDescriptor(self.width, self.height, self.format, self.data)


def read_blocks(data):
    """Walk the BLK{ sections of a Gfx2 file.

    Returns a list of GTXBlock. A truncated trailing block header ends the
    walk; a payload shorter than its declared size is an error.
    """
    if len(data) < FILE_HEADER_SIZE:
        raise GTXError("File too short for a Gfx2 header")
    if data[:4] != GFX2_MAGIC:
        raise GTXError(f"Bad file magic {bytes(data[:4])!r}, expected {GFX2_MAGIC!r}")

    blocks = []
    pos = FILE_HEADER_SIZE
    while pos + BLOCK_HEADER_SIZE <= len(data):
        header = BlockHeader._make(struct.unpack_from('>4s7I', data, pos))
        if header.magic != BLOCK_MAGIC:
            raise GTXError(f"Bad block magic {header.magic!r} at offset 0x{pos:X}")
        pos += BLOCK_HEADER_SIZE
        payload = bytes(data[pos:pos + header.data_size])
        if len(payload) < header.data_size:
            raise GTXError(
                f"Block type 0x{header.block_type:X} at offset 0x{pos:X} "
                f"expects {header.data_size} bytes, got {len(payload)}"
            )
        blocks.append(GTXBlock(header.block_type, header.data_size, payload, pos, header))
        pos += header.data_size
    return blocks


def parse_image_info(payload):
    if len(payload) != IMAGE_INFO_SIZE:
        raise GTXError(f"Image info block is {len(payload)} bytes, expected {IMAGE_INFO_SIZE}")
    width, height = struct.unpack_from('>II', payload, OFFSET_WIDTH)
    texture_format = struct.unpack_from('>I', payload, OFFSET_FORMAT)[0]
    image_size = struct.unpack_from('>I', payload, OFFSET_IMAGE_SIZE)[0]
    return width, height, texture_format, image_size


def read_gtx(data):
    """Return the first texture of a Gfx2 file as a GTXTexture."""
    info = None
    image = None
    for block in read_blocks(data):
        if block.block_type == BLOCK_TYPE_IMAGE_INFO:
            info = parse_image_info(block.data)
        elif block.block_type == BLOCK_TYPE_IMAGE_DATA and image is None:
            image = block.data

    if info is None:
        raise GTXError("No image info block found")
    if image is None:
        raise GTXError("No image data block found")
    width, height, texture_format, image_size = info
    return GTXTexture(width, height, texture_format, len(image), image, image_size)


def load_gtx(path):
    with open(path, 'rb') as f:
        return read_gtx(f.read())
