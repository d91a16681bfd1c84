"""Shared helpers for building test trees."""

import os


def make_tree(root: str, files: dict):
    """
    Create files below root.

    Args:
        root: Existing directory
        files: relative path ('/'-separated) -> bytes content; a value of
            None creates an empty directory
    """
    for rel_path, content in files.items():
        path = os.path.join(root, *rel_path.split('/'))
        if content is None:
            os.makedirs(path, exist_ok=True)
            continue
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'wb') as f:
            f.write(content)
