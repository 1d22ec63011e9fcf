"""Deterministic output names for split chunks."""
from __future__ import annotations

import os


def chunk_filename(input_path: str | os.PathLike[str], chunk_index: int) -> str:
    """Return the path of chunk ``chunk_index`` for ``input_path``.

    Only the final path segment is inspected, and it is split on its last
    ``.``: ``data.csv`` -> ``data_3.csv``, ``a.b.csv`` -> ``a.b_0.csv``.
    Without a ``.`` the index is appended: ``data`` -> ``data_3``.
    The directory part is kept verbatim.
    """

    path = os.fspath(input_path)
    name = os.path.basename(path)
    _stem, dot, extension = name.rpartition(".")
    if not dot:
        return f"{path}_{chunk_index}"
    prefix = path[: len(path) - len(extension) - 1]
    return f"{prefix}_{chunk_index}.{extension}"
