"""Conversion of on-disk paths to embedded image paths."""

import os

from .errors import InvalidPathError, PathNotUnderRootError


def normalize_path(path: str, root: str) -> bytes:
    """
    Convert an on-disk path to its embedded form.

    E.g. /home/me/sd/sys/config.g below root /home/me/sd becomes
    b'/sys/config.g'.

    Args:
        path: Absolute path of a file or directory below root
        root: Root directory of the image, with or without trailing separator

    Returns:
        UTF-8 encoded, '/'-rooted and '/'-separated path
    """
    prefix = root if root.endswith(os.sep) else root + os.sep
    if not path.startswith(prefix):
        raise PathNotUnderRootError(f"{path} is not below {root}")

    rel_path = path[len(prefix):]
    try:
        return ('/' + rel_path.replace(os.sep, '/')).encode('utf-8')
    except UnicodeEncodeError as e:
        raise InvalidPathError(f"{path!r} is not valid UTF-8") from e
