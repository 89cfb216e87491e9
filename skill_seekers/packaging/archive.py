"""ZIP encoding of generated skill files."""

import io
from collections.abc import Iterable
from zipfile import ZIP_DEFLATED, ZipFile

from skill_seekers.utils.exceptions import PackagingError

COMPRESSION_LEVEL = 9


def build_zip_archive(files: Iterable[tuple[str, str]]) -> bytes:
    """Encode (path, content) pairs into an in-memory ZIP archive.

    Entries keep the given order; contents are written as UTF-8.

    Args:
        files: Archive paths and text contents

    Returns:
        ZIP bytes

    Raises:
        PackagingError: If an entry cannot be written
    """
    buffer = io.BytesIO()
    try:
        with ZipFile(buffer, "w", compression=ZIP_DEFLATED, compresslevel=COMPRESSION_LEVEL) as archive:
            for path, content in files:
                archive.writestr(path, content.encode("utf-8"))
    except (ValueError, OSError) as e:
        raise PackagingError(f"Failed to build skill archive: {e}") from e
    return buffer.getvalue()
