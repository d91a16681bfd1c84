"""FS image builder - packs a directory tree into a flat binary image.

Layout (all integers little-endian uint32):
    magic              0x543C2BEF
    dir_offset         offset of the directory name section
    file_count         number of file table records
    file table         file_count x (name_offset, content_offset, content_length)
    directory names    NUL-terminated paths, list ends with an extra NUL
    file names         NUL-terminated paths, padded to 4 bytes
    file contents      per file: data, NUL, padding to 4 bytes

The file table and dir_offset are not known until the sections behind them
are written, so they are reserved with zeros and patched afterwards.
"""

import io
import os
import struct
from dataclasses import dataclass
from typing import List

from .constants import (
    MAGIC, HEADER_FORMAT, DIRECTORY_OFFSET_FIELD,
    FILE_ENTRY_FORMAT, FILE_ENTRY_SIZE, ALIGNMENT
)
from .content import open_content
from .paths import normalize_path
from .scanner import list_directories, list_files


def log(msg):
    print(f"[ImageBuilder] {msg}", flush=True)


@dataclass
class FileEntry:
    """A file to embed; offsets are assigned while the image is written."""
    source_path: str
    name_offset: int = 0
    content_offset: int = 0
    content_length: int = 0

    def to_bytes(self) -> bytes:
        return struct.pack(FILE_ENTRY_FORMAT, self.name_offset,
                           self.content_offset, self.content_length)


class ImageBuilder:
    """Builds an FS image from a root directory."""

    def __init__(self, root: str, verbose: bool = True):
        """
        Initialize the builder.

        Args:
            root: Directory whose files and subdirectories are embedded
            verbose: Log every embedded directory and file
        """
        self.root = os.path.abspath(root)
        self.verbose = verbose

        self.directories: List[str] = []
        self.files: List[FileEntry] = []

        self._stream = io.BytesIO()

    def build(self) -> bytes:
        """Scan the root directory and return the finished image."""
        self.directories = list_directories(self.root)
        self.files = [FileEntry(path) for path in list_files(self.root, self.directories)]
        self._stream = io.BytesIO()

        # Header with a dummy for the directory offset
        self._write(struct.pack(HEADER_FORMAT, MAGIC, 0, len(self.files)))

        # Reserve the file table
        table_position = self._position()
        self._write(b'\x00' * (FILE_ENTRY_SIZE * len(self.files)))

        # Now the directory offset is known
        directory_position = self._position()
        self._patch(DIRECTORY_OFFSET_FIELD, struct.pack('<I', directory_position))

        self._write_directories()
        self._write_filenames()
        self._write_contents()

        # Write the actual file table
        self._stream.seek(table_position)
        for entry in self.files:
            self._stream.write(entry.to_bytes())

        return self._stream.getvalue()

    def _write_directories(self):
        for directory in self.directories:
            if self.verbose:
                log(f"Embedding directory {directory}")
            self._write(normalize_path(directory, self.root) + b'\x00')
        self._write(b'\x00')

    def _write_filenames(self):
        for entry in self.files:
            entry.name_offset = self._position()
            self._write(normalize_path(entry.source_path, self.root) + b'\x00')
        self._write_padding()

    def _write_contents(self):
        for entry in self.files:
            entry.content_offset = self._position()
            with open_content(entry.source_path) as f:
                data = f.read()
            entry.content_length = len(data)
            if self.verbose:
                log(f"Embedding file {entry.source_path} "
                    f"({entry.content_length} bytes @ {entry.content_offset})")
            self._write(data)
            self._write(b'\x00')
            self._write_padding()

    def _position(self) -> int:
        return self._stream.tell()

    def _write(self, data: bytes):
        self._stream.write(data)

    def _patch(self, offset: int, data: bytes):
        """Overwrite already written bytes and return to the end."""
        self._stream.seek(offset)
        self._stream.write(data)
        self._stream.seek(0, io.SEEK_END)

    def _write_padding(self):
        remainder = self._position() % ALIGNMENT
        if remainder:
            self._write(b'\x00' * (ALIGNMENT - remainder))


def build_image(root: str, verbose: bool = True) -> bytes:
    """Build an FS image from the given root directory."""
    return ImageBuilder(root, verbose=verbose).build()
