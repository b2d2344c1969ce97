"""Filesystem primitives used by the materializer and the ledger.

Every failure is raised as an ``RsyncDirError`` naming the operation and the
path, with the original ``OSError`` chained.
"""

import os
import tempfile
from pathlib import Path
from typing import Union

from rsyncdir.common.exceptions import filesystem_error

# mkstemp creates files as 0600
_FILE_MODE = 0o644


def path_with_extension(path: Union[str, Path], extension: str) -> Path:
    """Return ``path`` with ``.<extension>`` appended to its full name.

    Unlike ``Path.with_suffix`` an existing suffix is kept, so
    ``current`` becomes ``current.tmp`` and ``state.json`` becomes
    ``state.json.tmp``.
    """
    path = Path(path)
    return path.with_name(f"{path.name}.{extension}")


def read_file(path: Union[str, Path]) -> bytes:
    """Read an entire file.

    Raises:
        RsyncDirError: If the file cannot be read
    """
    path = Path(path)
    try:
        return path.read_bytes()
    except OSError as exc:
        raise filesystem_error("read file", path, exc) from exc


def write_buf(path: Union[str, Path], data: bytes) -> None:
    """Write ``data`` to ``path``, creating parent directories.

    Uses atomic write (temp file + replace) so a partially written file is
    never visible under its final name.

    Args:
        path: Destination file path
        data: Bytes to write

    Raises:
        RsyncDirError: If the directory, the temp file or the rename fails
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise filesystem_error("create directory", path.parent, exc) from exc

    # Temp file in the destination directory (same filesystem for atomic rename)
    try:
        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{path.name}.",
            suffix=".tmp",
            dir=path.parent,
        )
    except OSError as exc:
        raise filesystem_error("create temporary file for", path, exc) from exc

    try:
        with os.fdopen(fd, "wb") as f:
            os.fchmod(f.fileno(), _FILE_MODE)
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

        os.replace(tmp_path, path)

    except OSError as exc:
        # Clean up temp file on failure
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        raise filesystem_error("write file", path, exc) from exc
