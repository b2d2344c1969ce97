"""Writes the object set of a snapshot into a revision directory."""

from pathlib import Path, PurePosixPath
from typing import Any, Iterable, Sequence, Tuple, Union

from rsyncdir.common.exceptions import ErrorCode, filesystem_error, validation_error
from rsyncdir.constants import RSYNC_URI_SCHEME
from rsyncdir.logging import get_logger
from rsyncdir.utils.decorators import traced
from rsyncdir.utils.file_ops import write_buf

logger = get_logger(__name__)


def make_rsync_repo_path(uri: str) -> PurePosixPath:
    """Map an rsync URI to a path relative to the revision directory.

    The rsync module is dropped: which module a directory is served as is
    decided by the rsyncd configuration, which should point the module at
    ``<base_dir>/current``. A URI with a single path segment has no module
    to drop. Everything after the authority is path; ``#`` and ``?`` are
    ordinary file name characters.

    Example:
        >>> make_rsync_repo_path("rsync://rpki.example.net/repo/ta/ta.cer")
        PurePosixPath('ta/ta.cer')
        >>> make_rsync_repo_path("rsync://x/y.cer")
        PurePosixPath('y.cer')

    Raises:
        RsyncDirError: If the URI is not an rsync URI or would resolve
            outside the revision directory
    """
    scheme, separator, rest = uri.partition("://")
    authority, _, path = rest.partition("/")
    if not separator or scheme.lower() != RSYNC_URI_SCHEME or not authority:
        raise validation_error(
            f"Not an rsync URI: '{uri}'",
            field="uri",
            value=uri,
            error_code=ErrorCode.INVALID_URI,
        )

    segments = [segment for segment in path.split("/") if segment]
    if len(segments) > 1:
        segments = segments[1:]

    if (
        not segments
        or path.endswith("/")
        or any(segment in (".", "..") for segment in segments)
        or any(ord(char) < 0x20 or char == "\x7f" for char in path)
    ):
        raise validation_error(
            f"rsync URI does not name a file inside the repository: '{uri}'",
            field="uri",
            value=uri,
            error_code=ErrorCode.INVALID_URI,
        )

    return PurePosixPath(*segments)


def _unpack(element: Any) -> Tuple[str, bytes]:
    if isinstance(element, Sequence) and not isinstance(element, (str, bytes)):
        if len(element) != 2:
            raise validation_error(
                f"Expected a (uri, data) pair, got {len(element)} items",
                field="element",
                value=element,
            )
        uri, data = element
        return uri, data
    try:
        return element.uri, element.data
    except AttributeError as exc:
        raise validation_error(
            f"Not a repository object: {type(element).__name__}",
            field="element",
            value=type(element).__name__,
        ) from exc


@traced(
    "rsyncdir.content.write",
    attribute_getter=lambda out_path, elements: {"rsyncdir.revision.path": str(out_path)},
)
def write_rsync_content(out_path: Union[str, Path], elements: Iterable[Any]) -> int:
    """Write every object of a snapshot under ``out_path``.

    Args:
        out_path: Revision directory, normally not yet existing
        elements: ``(uri, bytes)`` pairs, or objects with ``uri`` and ``data``

    Returns:
        Number of files written

    Raises:
        RsyncDirError: On the first URI or I/O failure. Files already written
            are left in place; the directory is not referenced by the ledger
            and will not be published.
    """
    out_path = Path(out_path)
    logger.info("Writing rsync repository to: %s", out_path)

    count = 0
    for element in elements:
        uri, data = _unpack(element)
        path = out_path / make_rsync_repo_path(uri)
        logger.debug("Writing rsync file %s", path)
        write_buf(path, data)
        count += 1

    # An empty snapshot still needs a directory to publish
    try:
        out_path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise filesystem_error("create directory", out_path, exc) from exc

    logger.info("Wrote %d rsync files to: %s", count, out_path)
    return count
