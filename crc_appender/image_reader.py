"""Reads an FS image back into its directories and files."""

import struct
from dataclasses import dataclass, field
from typing import List

from .constants import MAGIC, HEADER_FORMAT, HEADER_SIZE, FILE_ENTRY_FORMAT, FILE_ENTRY_SIZE
from .errors import ImageFormatError


@dataclass
class ParsedFile:
    name: str
    name_offset: int
    content_offset: int
    content_length: int
    content: bytes


@dataclass
class ParsedImage:
    directory_offset: int
    directories: List[str] = field(default_factory=list)
    files: List[ParsedFile] = field(default_factory=list)


def _read_string(data: bytes, offset: int) -> str:
    """Read a NUL-terminated UTF-8 string."""
    end = data.find(b'\x00', offset)
    if end < 0:
        raise ImageFormatError(f"Unterminated string at offset {offset}")
    try:
        return data[offset:end].decode('utf-8')
    except UnicodeDecodeError as e:
        raise ImageFormatError(f"Invalid name at offset {offset}") from e


def parse_image(data: bytes) -> ParsedImage:
    """
    Parse an FS image.

    Args:
        data: Complete image, starting with the magic number

    Returns:
        ParsedImage with directories and files in table order
    """
    if len(data) < HEADER_SIZE:
        raise ImageFormatError(f"Image too small ({len(data)} bytes)")

    magic, directory_offset, file_count = struct.unpack_from(HEADER_FORMAT, data, 0)
    if magic != MAGIC:
        raise ImageFormatError(f"Invalid magic 0x{magic:08X}")

    table_end = HEADER_SIZE + file_count * FILE_ENTRY_SIZE
    if table_end > len(data):
        raise ImageFormatError(f"File table of {file_count} entries exceeds image size")
    if not table_end <= directory_offset < len(data):
        raise ImageFormatError(f"Directory offset {directory_offset} out of range")

    image = ParsedImage(directory_offset=directory_offset)

    # Directory names until the empty string
    offset = directory_offset
    while True:
        name = _read_string(data, offset)
        offset += len(name.encode('utf-8')) + 1
        if not name:
            break
        image.directories.append(name)

    for i in range(file_count):
        name_offset, content_offset, content_length = struct.unpack_from(
            FILE_ENTRY_FORMAT, data, HEADER_SIZE + i * FILE_ENTRY_SIZE)
        if name_offset >= len(data) or content_offset + content_length > len(data):
            raise ImageFormatError(f"File entry {i} points outside the image")
        image.files.append(ParsedFile(
            name=_read_string(data, name_offset),
            name_offset=name_offset,
            content_offset=content_offset,
            content_length=content_length,
            content=data[content_offset:content_offset + content_length],
        ))

    return image
