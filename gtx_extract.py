# gtx_extract.py
# Usage: python gtx_extract.py input.gtx output.bmp
import argparse
import os
import sys

from PIL import Image

from WiiU.bmp_writer import save_bmp
from WiiU.gtx_reader import GTXError, load_gtx
from WiiU.wiiu_texture_decoder import DecodeError, decode


class OutputFormatError(Exception):
    pass


def build_parser():
    parser = argparse.ArgumentParser(description="Extract a Wii U GTX texture to BMP or any format Pillow writes.")
    parser.add_argument('input', help='the GTX file to read')
    parser.add_argument('output', help='the image to write (.bmp, .png, ...)')
    parser.add_argument('--crop', action='store_true', help='crop the padded surface back to the declared size')
    parser.add_argument('--quiet', action='store_true', help='do not print texture information')
    return parser


def output_writer(output_path):
    ext = os.path.splitext(output_path)[1].lower()
    if ext == '.bmp':
        return save_bmp
    image_format = Image.registered_extensions().get(ext)
    if image_format not in Image.SAVE:
        raise OutputFormatError(f"no image writer for extension {ext!r}")
    return lambda path, raster: raster.to_image().save(path, format=image_format)


def extract(input_path, output_path, crop=False, quiet=False):
    write = output_writer(output_path)
    texture = load_gtx(input_path)
    if not quiet:
        print(f"Width: {texture.width} - Height: {texture.height} - Format: 0x{texture.format:x} "
              f"- Size: {texture.data_size} ({texture.data_size:x})")
        print(f"Padded Width: {texture.padded_width} - Padded Height: {texture.padded_height}")

    raster = decode(texture.to_descriptor())
    if crop:
        raster = raster.crop(texture.width, texture.height)
    write(output_path, raster)
    return raster


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        extract(args.input, args.output, crop=args.crop, quiet=args.quiet)
    except OutputFormatError as e:
        print(f"Cannot write {args.output}: {e}", file=sys.stderr)
        return 1
    except GTXError as e:
        print(f"Error while parsing GTX file {args.input}: {e}", file=sys.stderr)
        return 1
    except DecodeError as e:
        print(f"Error while decoding {args.input}: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Cannot access {e.filename}: {e.strerror}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
