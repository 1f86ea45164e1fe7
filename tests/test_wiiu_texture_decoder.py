import numpy as np
import pytest
from PIL import Image

from conftest import image_info, pack_alpha_block, pack_color_block, rgba8_pattern, tile_blocks, tile_rgba8
from WiiU.dxt_codec import exp5to8r, exp6to8g
from WiiU.swizzle import compressed_indices
from WiiU.wiiu_texture_decoder import (
    AddressOutOfRange, BufferTooSmall, DecodeError, PixelFormat, RasterBuffer,
    TextureDescriptor, UnsupportedFormat, WiiUTextureDecoder, decode, is_supported,
    pad_dimension, required_size,
)


@pytest.mark.parametrize("width, height", [(64, 64), (128, 64), (64, 128)])
def test_rgba8_round_trips_tiled_pattern(width, height):
    pattern = rgba8_pattern(width, height)
    raster = decode(TextureDescriptor(width, height, PixelFormat.R8G8B8A8, tile_rgba8(pattern)))
    assert (raster.width, raster.height) == (width, height)
    assert raster.pixels.dtype == np.uint8
    np.testing.assert_array_equal(raster.pixels, pattern)


def test_rgba8_accepts_plain_format_code_and_trailing_bytes():
    pattern = rgba8_pattern(64, 64)
    raw = tile_rgba8(pattern)
    exact = decode(TextureDescriptor(64, 64, 0x1A, raw))
    padded = decode(TextureDescriptor(64, 64, 0x1A, raw + b'\xff' * 256))
    assert exact.tobytes() == padded.tobytes() == pattern.tobytes()


def solid_dxt5_block(bx, by):
    color = ((bx & 31) << 11) | ((by & 63) << 5)
    return pack_alpha_block((bx * 8) & 0xFF, 0, [0] * 16) + pack_color_block(color, color, [0] * 16)


def test_dxt5_places_blocks_through_compressed_mapping():
    width, height = 128, 64
    block_width, block_height = width // 4, height // 4
    blocks = [[solid_dxt5_block(bx, by) for bx in range(block_width)] for by in range(block_height)]
    raster = decode(TextureDescriptor(width, height, PixelFormat.DXT5, tile_blocks(blocks, block_width, block_height)))

    for by in range(block_height):
        for bx in range(block_width):
            color = ((bx & 31) << 11) | ((by & 63) << 5)
            expected = [exp5to8r(color), exp6to8g(color), 0, (bx * 8) & 0xFF]
            region = raster.pixels[by * 4:by * 4 + 4, bx * 4:bx * 4 + 4]
            assert (region == expected).all(), (bx, by)


def test_dxt5_texels_land_inside_their_block():
    block_width, block_height = 32, 16
    gradient = pack_alpha_block(255, 255, [0] * 16) + pack_color_block(0xF800, 0x001F, [k % 4 for k in range(16)])
    blank = pack_alpha_block(0, 0, [0] * 16) + pack_color_block(0, 0, [0] * 16)
    blocks = [[blank] * block_width for _ in range(block_height)]
    blocks[3][5] = gradient
    raster = decode(TextureDescriptor(128, 64, PixelFormat.DXT5, tile_blocks(blocks, block_width, block_height)))

    assert tuple(raster.pixels[12, 20]) == (255, 0, 0, 255)
    assert tuple(raster.pixels[12, 21]) == (0, 0, 255, 255)
    assert tuple(raster.pixels[15, 23]) == (85, 0, 170, 255)
    assert tuple(raster.pixels[12, 24]) == (0, 0, 0, 0)


def test_unsupported_format_is_rejected_first():
    assert is_supported(0x1A)
    assert is_supported(0x33)
    assert not is_supported(0x31)
    with pytest.raises(UnsupportedFormat) as excinfo:
        decode(TextureDescriptor(64, 64, 0x19, b''))
    assert excinfo.value.format_code == 0x19
    assert "0x19" in str(excinfo.value)


@pytest.mark.parametrize("texture_format, required", [(0x1A, 64 * 64 * 4), (0x33, 64 * 64)])
def test_buffer_too_small(texture_format, required):
    assert required_size(64, 64, texture_format) == required
    with pytest.raises(BufferTooSmall) as excinfo:
        decode(TextureDescriptor(64, 64, texture_format, bytes(required - 1)))
    assert excinfo.value.required == required
    assert excinfo.value.actual == required - 1
    assert isinstance(excinfo.value, DecodeError)


def test_narrow_dxt5_surface_is_flagged_not_decoded():
    with pytest.raises(AddressOutOfRange) as excinfo:
        decode(TextureDescriptor(64, 64, PixelFormat.DXT5, bytes(64 * 64)))
    assert excinfo.value.limit == 256
    assert excinfo.value.index >= 256


@pytest.mark.parametrize("value, padded", [(1, 64), (63, 64), (64, 64), (65, 128), (320, 320), (384, 384), (500, 512)])
def test_pad_dimension(value, padded):
    assert pad_dimension(value) == padded


def test_padding_is_a_no_op_on_aligned_dimensions():
    pattern = rgba8_pattern(128, 64)
    raw = tile_rgba8(pattern)
    direct = decode(TextureDescriptor(128, 64, 0x1A, raw))
    padded = decode(TextureDescriptor(pad_dimension(128), pad_dimension(64), 0x1A, raw))
    assert direct.tobytes() == padded.tobytes()


def test_raster_buffer_views():
    pixels = rgba8_pattern(64, 64)
    raster = RasterBuffer(64, 64, pixels)
    assert len(raster.tobytes()) == 64 * 64 * 4
    assert raster.row(1) == pixels[1].tobytes()

    cropped = raster.crop(40, 30)
    assert (cropped.width, cropped.height) == (40, 30)
    np.testing.assert_array_equal(cropped.pixels, pixels[:30, :40])

    img = raster.to_image()
    assert img.mode == "RGBA"
    assert img.size == (64, 64)
    assert img.getpixel((3, 2)) == tuple(pixels[2, 3])


def test_texture_decoder_interface():
    decoder = WiiUTextureDecoder()
    assert decoder.parse_texture_header(image_info(500, 300, 0x33)) == (500, 300, 0x33)
    assert decoder.parse_texture_header(b'\x00' * 8) == (0, 0, 0)
    assert decoder.supports(0x1A)
    assert not decoder.supports(0x08)
    assert decoder.format_name(0x33) == "DXT5"
    assert decoder.format_name(0x08) == "Unknown (0x8)"

    pattern = rgba8_pattern(64, 64)
    img = decoder.decode_texture(tile_rgba8(pattern), 50, 40, 0x1A)
    assert isinstance(img, Image.Image)
    assert img.size == (64, 64)
    assert img.tobytes() == pattern.tobytes()


def test_save_texture_writes_png(tmp_path):
    pattern = rgba8_pattern(64, 64)
    output = tmp_path / "out.png"
    WiiUTextureDecoder().save_texture(tile_rgba8(pattern), 64, 64, 0x1A, output)
    with Image.open(output) as img:
        assert img.convert("RGBA").tobytes() == pattern.tobytes()


def test_dxt5_gathers_blocks_beyond_the_declared_surface():
    # a 64x64 surface maps up to block 447, so the payload must hold 512 blocks
    source_blocks = [
        pack_alpha_block(k & 0xFF, 0, [0] * 16) + pack_color_block((k >> 8) << 11, (k >> 8) << 11, [0] * 16)
        for k in range(512)
    ]
    raster = decode(TextureDescriptor(64, 64, PixelFormat.DXT5, b''.join(source_blocks)))

    indices = compressed_indices(16, 16)
    for by in range(16):
        for bx in range(16):
            k = int(indices[by, bx])
            expected = [exp5to8r((k >> 8) << 11), 0, 0, k & 0xFF]
            assert (raster.pixels[by * 4:by * 4 + 4, bx * 4:bx * 4 + 4] == expected).all(), (bx, by)


@pytest.mark.parametrize("texture_format", [PixelFormat.R8G8B8A8, PixelFormat.DXT5])
@pytest.mark.parametrize("width, height", [(0, 0), (0, 64), (64, 0)])
def test_zero_dimension_decodes_to_empty_raster(texture_format, width, height):
    raster = decode(TextureDescriptor(width, height, texture_format, b''))
    assert (raster.width, raster.height) == (width, height)
    assert raster.pixels.shape == (height, width, 4)
    assert raster.tobytes() == b''
