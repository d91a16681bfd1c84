# CRC32 appender
# Packs a directory into an embedded FS image and appends it to a firmware binary

__version__ = '1.0.0'

from .image_builder import FileEntry, ImageBuilder, build_image
from .image_reader import parse_image
from .firmware import embed

__all__ = ['FileEntry', 'ImageBuilder', 'build_image', 'parse_image', 'embed']
