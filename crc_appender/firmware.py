"""Firmware patching: append an FS image and a CRC32 to a firmware binary.

The firmware header holds, at CRC32_ADDRESS, the address where the trailing
CRC32 is expected. Appending an FS image moves the CRC32 back by the image
length, so that field is increased accordingly before the checksum of the
whole file is appended.
"""

import os
import struct
import zlib
from typing import BinaryIO, Optional

from .constants import ALIGNMENT, CRC32_ADDRESS, CRC32_SIZE
from .errors import FirmwareError
from .image_builder import build_image


def log(msg):
    print(f"[Firmware] {msg}", flush=True)


def check_firmware(size: int):
    """Make sure a firmware binary of the given size can be patched."""
    if size < CRC32_ADDRESS + CRC32_SIZE:
        raise FirmwareError("Firmware binary is too small")
    if size % ALIGNMENT != 0:
        raise FirmwareError("Firmware binary is not aligned")


def append_image(fp: BinaryIO, image: bytes):
    """Append an FS image and fix the CRC32 address in the header."""
    fp.seek(0, os.SEEK_END)
    fp.write(image)

    fp.seek(CRC32_ADDRESS)
    address = struct.unpack('<I', fp.read(CRC32_SIZE))[0]
    address = (address + len(image)) & 0xFFFFFFFF

    fp.seek(CRC32_ADDRESS)
    fp.write(struct.pack('<I', address))


def append_crc32(fp: BinaryIO) -> int:
    """Compute the CRC32 of the whole file and append it."""
    fp.seek(0)
    crc32 = zlib.crc32(fp.read()) & 0xFFFFFFFF

    fp.seek(0, os.SEEK_END)
    fp.write(struct.pack('<I', crc32))
    return crc32


def embed(firmware_path: str, fs_directory: Optional[str] = None,
          image: Optional[bytes] = None) -> int:
    """
    Patch a firmware binary in place.

    Args:
        firmware_path: Firmware binary to patch
        fs_directory: Optional root directory of an FS image to append
        image: Prebuilt FS image, used instead of building one from fs_directory

    Returns:
        The appended CRC32
    """
    with open(firmware_path, 'r+b') as fp:
        check_firmware(os.fstat(fp.fileno()).st_size)
        log(f"Firmware binary: {firmware_path}")

        if image is None and fs_directory:
            log(f"FS root directory: {fs_directory}")
            image = build_image(fs_directory)
        if image is not None:
            append_image(fp, image)

        crc32 = append_crc32(fp)

    log(f"CRC32 = 0x{struct.pack('<I', crc32).hex().upper()}")
    return crc32
