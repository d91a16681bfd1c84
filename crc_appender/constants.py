"""Constants for the embedded filesystem image and firmware layout."""

import struct

# Every FS image starts with this value
MAGIC = 0x543C2BEF

# Header: magic, directory section offset, file count
HEADER_FORMAT = '<III'
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)  # 12 bytes
DIRECTORY_OFFSET_FIELD = 4

# File table record: name offset, content offset, content length
FILE_ENTRY_FORMAT = '<III'
FILE_ENTRY_SIZE = struct.calcsize(FILE_ENTRY_FORMAT)  # 12 bytes

# Sections and file contents are padded to this boundary
ALIGNMENT = 4

# Files with these extensions are stripped of comments and empty lines
SCRIPT_EXTENSIONS = ('.g',)

COMMENT_CHAR = ';'
QUOTE_CHAR = '"'

# Firmware header field holding the address of the trailing CRC32
CRC32_ADDRESS = 0x1C
CRC32_SIZE = 4

# Whitespace trimmed from stripped script lines. Unlike str.isspace() this
# excludes the \x1c-\x1f separators, which are kept as line content.
WHITESPACE = (
    '\t\n\x0b\x0c\r \x85\xa0\u1680'
    '\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a'
    '\u2028\u2029\u202f\u205f\u3000'
)
