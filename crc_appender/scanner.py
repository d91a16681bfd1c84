"""Discovery of the directories and files to embed."""

import os
from typing import List


def list_directories(root: str) -> List[str]:
    """
    Get all directories below root, depth-first.

    Each directory is followed by its own subdirectories before the next
    sibling. Symlinked directories are followed; the tree must be finite.
    """
    result = []
    with os.scandir(root) as it:
        subdirs = [entry.path for entry in it if entry.is_dir()]
    for subdir in subdirs:
        result.append(subdir)
        result.extend(list_directories(subdir))
    return result


def _files_in(directory: str) -> List[str]:
    with os.scandir(directory) as it:
        return [entry.path for entry in it if entry.is_file()]


def list_files(root: str, directories: List[str]) -> List[str]:
    """Get the files directly in root followed by the files of each directory."""
    result = _files_in(root)
    for directory in directories:
        result.extend(_files_in(directory))
    return result
