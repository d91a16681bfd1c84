"""Test firmware patching and the command line."""

import os
import struct
import sys
import tempfile
import zlib
from unittest import mock

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from crc_appender.appender import main as appender_main
from crc_appender.constants import CRC32_ADDRESS
from crc_appender.errors import FirmwareError, TransformError
from crc_appender.firmware import check_firmware, embed
from crc_appender.image_builder import build_image
from crc_appender.image_reader import parse_image
from helpers import make_tree

FIRMWARE_SIZE = 64
CRC32_POINTER = 0x00400000 + FIRMWARE_SIZE


def _firmware() -> bytes:
    data = bytearray(range(FIRMWARE_SIZE))
    struct.pack_into('<I', data, CRC32_ADDRESS, CRC32_POINTER)
    return bytes(data)


def _write(path, data):
    with open(path, 'wb') as f:
        f.write(data)


def _read(path):
    with open(path, 'rb') as f:
        return f.read()


def test_check_firmware():
    check_firmware(CRC32_ADDRESS + 4)
    for size in (0, CRC32_ADDRESS, FIRMWARE_SIZE + 2):
        try:
            check_firmware(size)
        except FirmwareError:
            continue
        raise AssertionError(f"size {size} accepted")


def test_crc_only():
    with tempfile.TemporaryDirectory() as tmp:
        firmware = os.path.join(tmp, 'firmware.bin')
        _write(firmware, _firmware())

        crc32 = embed(firmware)
        data = _read(firmware)

    assert len(data) == FIRMWARE_SIZE + 4
    assert data[:FIRMWARE_SIZE] == _firmware()
    assert struct.unpack('<I', data[-4:])[0] == crc32 == zlib.crc32(_firmware())


def test_embed_fs_image():
    with tempfile.TemporaryDirectory() as tmp:
        root = os.path.join(tmp, 'sd')
        make_tree(root, {'sys/config.g': b'G21 ; mm\n', 'readme.txt': b'hi'})
        firmware = os.path.join(tmp, 'firmware.bin')
        _write(firmware, _firmware())

        crc32 = embed(firmware, root)
        data = _read(firmware)
        image = build_image(root, verbose=False)

    image_data = data[FIRMWARE_SIZE:-4]
    assert image_data == image
    assert struct.unpack_from('<I', data, CRC32_ADDRESS)[0] == CRC32_POINTER + len(image)
    assert crc32 == zlib.crc32(data[:-4])
    assert {f.name for f in parse_image(image_data).files} == {'/sys/config.g', '/readme.txt'}


def test_cli_embeds_and_writes_output():
    with tempfile.TemporaryDirectory() as tmp:
        root = os.path.join(tmp, 'sd')
        make_tree(root, {'www/index.html': b'<html/>'})
        firmware = os.path.join(tmp, 'firmware.bin')
        output = os.path.join(tmp, 'fs.img')
        _write(firmware, _firmware())

        assert appender_main([root, firmware, '--output', output]) == 0
        assert _read(firmware)[FIRMWARE_SIZE:-4] == _read(output)
        assert appender_main(['--list', output]) == 0


def test_cli_errors():
    with tempfile.TemporaryDirectory() as tmp:
        firmware = os.path.join(tmp, 'firmware.bin')
        _write(firmware, b'\x00' * 6)
        other = os.path.join(tmp, 'other.bin')
        _write(other, _firmware())

        assert appender_main([]) == 0
        assert appender_main([os.path.join(tmp, 'missing')]) == 1
        assert appender_main([tmp]) == 1
        assert appender_main([tmp, tmp]) == 1
        assert appender_main([firmware, other]) == 1
        # Too small and unaligned
        assert appender_main([firmware]) == 1
        assert _read(firmware) == b'\x00' * 6


def test_failed_build_leaves_firmware_unchanged():
    with tempfile.TemporaryDirectory() as tmp:
        root = os.path.join(tmp, 'sd')
        make_tree(root, {'readme.txt': b'hi', 'sys/bad.g': b'\xff\xfe\n'})
        firmware = os.path.join(tmp, 'firmware.bin')
        _write(firmware, _firmware())

        try:
            embed(firmware, root)
        except TransformError:
            pass
        else:
            raise AssertionError("TransformError not raised")
        assert _read(firmware) == _firmware()

        assert appender_main([firmware, root]) == 1
        assert _read(firmware) == _firmware()


def test_unreadable_file_leaves_firmware_unchanged():
    with tempfile.TemporaryDirectory() as tmp:
        root = os.path.join(tmp, 'sd')
        make_tree(root, {'readme.txt': b'hi'})
        firmware = os.path.join(tmp, 'firmware.bin')
        _write(firmware, _firmware())

        with mock.patch('crc_appender.image_builder.open_content',
                        side_effect=PermissionError(13, 'Permission denied')):
            assert appender_main([firmware, root]) == 1
        assert _read(firmware) == _firmware()


def test_cli_rejects_undecodable_filename():
    with tempfile.TemporaryDirectory() as tmp:
        root = os.path.join(tmp, 'sd')
        os.makedirs(root)
        _write(os.path.join(os.fsencode(root), b'\xff.txt'), b'data')
        firmware = os.path.join(tmp, 'firmware.bin')
        _write(firmware, _firmware())

        assert appender_main([firmware, root]) == 1
        assert _read(firmware) == _firmware()


def test_cli_list_errors():
    with tempfile.TemporaryDirectory() as tmp:
        root = os.path.join(tmp, 'sd')
        make_tree(root, {'a.txt': b'a'})
        firmware = os.path.join(tmp, 'firmware.bin')
        _write(firmware, _firmware())
        image = build_image(root, verbose=False)
        corrupt = bytearray(image)
        corrupt[parse_image(image).files[0].name_offset] = 0xFF
        path = os.path.join(tmp, 'fs.img')
        _write(path, bytes(corrupt))

        assert appender_main(['--list', path]) == 1

        _write(path, image)
        assert appender_main(['--list', path]) == 0
        assert appender_main(['--list', path, firmware]) == 1
        assert appender_main(['--list', path, root]) == 1
        assert _read(firmware) == _firmware()


def main():
    tests = [v for k, v in sorted(globals().items()) if k.startswith('test_')]
    for test in tests:
        test()
        print(f"  {test.__name__}: OK")
    print("=== ALL TESTS PASSED ===")
    return 0


if __name__ == "__main__":
    sys.exit(main())
