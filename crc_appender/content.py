"""Content provider: the bytes embedded for each file."""

import enum
import io
import re
from typing import BinaryIO, Iterable, Iterator

from .constants import SCRIPT_EXTENSIONS, COMMENT_CHAR, QUOTE_CHAR, WHITESPACE
from .errors import TransformError

_LINE_BREAK = re.compile(r'\r\n|\r|\n')


class ContentHandling(enum.Enum):
    """How the content of a file is turned into embedded bytes."""
    RAW = 'raw'
    STRIP_COMMENTS = 'strip_comments'


def content_handling(filename: str) -> ContentHandling:
    """Pick the content handling for a file by its extension."""
    if filename.endswith(SCRIPT_EXTENSIONS):
        return ContentHandling.STRIP_COMMENTS
    return ContentHandling.RAW


def strip_comment(line: str) -> str:
    """
    Remove a trailing ';' comment from a single line.

    The line is scanned from its end. A '"' seen before any ';' stops the
    scan and leaves the line as it is, so semicolons inside a string that
    closes last on the line are kept. Quotes are not balanced across lines.
    """
    for i in range(len(line) - 1, -1, -1):
        if line[i] == QUOTE_CHAR:
            break
        if line[i] == COMMENT_CHAR:
            return line[:i].rstrip(WHITESPACE)
    return line


def split_lines(text: str) -> Iterator[str]:
    """Split text on \\r\\n, \\r or \\n without yielding a trailing empty line."""
    lines = _LINE_BREAK.split(text)
    if lines and lines[-1] == '':
        lines.pop()
    return iter(lines)


def strip_script(lines: Iterable[str]) -> Iterator[str]:
    """Yield the non-empty lines of a script with comments removed."""
    for line in lines:
        line = strip_comment(line)
        if line.strip(WHITESPACE):
            yield line


def strip_script_bytes(data: bytes, filename: str = '<data>') -> bytes:
    """Strip comments and empty lines from the raw content of a script file."""
    try:
        text = data.decode('utf-8-sig')
    except UnicodeDecodeError as e:
        raise TransformError(f"Cannot decode {filename}: {e}") from e

    return ''.join(line + '\n' for line in strip_script(split_lines(text))).encode('utf-8')


def open_content(source_path: str) -> BinaryIO:
    """
    Open the content to embed for a file.

    Script files are read completely and returned stripped in memory, all
    other files are returned as an open file object. The caller closes the
    returned stream.
    """
    if content_handling(source_path) is ContentHandling.STRIP_COMMENTS:
        with open(source_path, 'rb') as f:
            data = f.read()
        return io.BytesIO(strip_script_bytes(data, source_path))

    return open(source_path, 'rb')
