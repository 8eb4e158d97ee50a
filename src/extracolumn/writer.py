"""
File writer for extracolumn.

Writes the exported text to disk as a whole-file replace.
"""

from __future__ import annotations

import contextlib
import os
import stat
import tempfile
from pathlib import Path


class TextFileWriter:
    """Writes text files atomically.

    Content goes to a temporary file next to the target which then replaces
    the target in one step, so readers see either the old file or the new
    one and a failed write leaves the old file untouched.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def write(self, path: str | Path, content: str) -> Path:
        """Replace ``path`` with ``content``.

        Args:
            path: Target file; parent directories are created
            content: Text written verbatim, without newline translation

        Returns:
            Resolved path of the written file
        """
        target = Path(path).resolve()
        target.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
        )
        try:
            os.chmod(tmp_name, _file_mode(target))
            with os.fdopen(fd, "w", encoding=self.encoding, newline="") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, target)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise

        return target


def _read_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


# Read once at import; os.umask can only be queried by setting it
_UMASK = _read_umask()


def _file_mode(target: Path) -> int:
    """Mode for the replacement file: the existing file's, else umask default."""
    if target.exists():
        return stat.S_IMODE(target.stat().st_mode)
    return 0o666 & ~_UMASK
