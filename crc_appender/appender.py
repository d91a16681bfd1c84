"""CRC32 appender with optional FS image embedder.

Appends an FS image built from a directory to a firmware binary, fixes the
CRC32 address in the firmware header and appends the CRC32 of the result.

Usage:
    python3 -m crc_appender firmware.bin [sd-files/]
    python3 -m crc_appender --output fs.img sd-files/
    python3 -m crc_appender --list fs.img
"""
import argparse
import os
import sys
from typing import List, Optional

from . import __version__
from .errors import CrcAppenderError
from .firmware import embed
from .image_builder import build_image
from .image_reader import parse_image


def error(msg):
    print(f"ERROR: {msg}", file=sys.stderr, flush=True)


def list_image(path: str):
    """Print the table of contents of an FS image."""
    with open(path, 'rb') as f:
        image = parse_image(f.read())

    print(f"Directories ({len(image.directories)}):")
    for directory in image.directories:
        print(f"  {directory}")
    print(f"Files ({len(image.files)}):")
    for entry in image.files:
        print(f"  {entry.name} ({entry.content_length} bytes @ {entry.content_offset})")


def classify_paths(paths: List[str]):
    """
    Sort command line paths into FS directory and firmware file.

    Returns:
        (fs_directory, firmware_path), either may be None
    """
    fs_directory = firmware_path = None
    for path in paths:
        if os.path.isdir(path):
            if fs_directory:
                raise CrcAppenderError("Only a single FS directory may be specified")
            fs_directory = os.path.abspath(path)
        elif os.path.isfile(path):
            if firmware_path:
                raise CrcAppenderError("Only a single firmware file may be specified")
            firmware_path = os.path.abspath(path)
        else:
            raise CrcAppenderError(f"Invalid file or directory: {path}")
    return fs_directory, firmware_path


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog='crc-appender',
        description='CRC32 appender with optional FS image embedder'
    )
    parser.add_argument('paths', nargs='*', metavar='PATH',
                        help='Firmware binary and optional FS root directory')
    parser.add_argument('--output', metavar='IMAGE',
                        help='Also write the FS image to this file')
    parser.add_argument('--list', metavar='IMAGE', dest='list_image',
                        help='Print the contents of an FS image and exit')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    args = parser.parse_args(argv)

    if not args.paths and not args.list_image:
        print(f"CRC32 appender with optional FS image embedder v{__version__}")
        parser.print_usage()
        return 0

    try:
        if args.list_image:
            if args.paths:
                raise CrcAppenderError("--list cannot be combined with a firmware file or FS directory")
            list_image(args.list_image)
            return 0

        fs_directory, firmware_path = classify_paths(args.paths)

        image = None
        if args.output:
            if not fs_directory:
                raise CrcAppenderError("No FS directory specified")
            image = build_image(fs_directory)
            with open(args.output, 'wb') as f:
                f.write(image)
            print(f"Wrote FS image {args.output} ({len(image)} bytes)")
            if not firmware_path:
                return 0

        if not firmware_path:
            raise CrcAppenderError("No firmware binary specified")

        embed(firmware_path, fs_directory, image=image)
    except (CrcAppenderError, OSError) as e:
        error(e)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
