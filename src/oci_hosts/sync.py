from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import BinaryIO

from .logging import get_logger
from .util.errors import SyncError

LOG = get_logger(__name__)

DEFAULT_HOSTS_PATH = Path("/etc/hosts")
SENTINEL_TOKEN = "# oci_hosts"
MARKER_LINE = "# oci_hosts text below this will be removed\n"
HOSTS_FILE_MODE = 0o644

_SENTINEL_BYTES = SENTINEL_TOKEN.encode("utf-8")


def _copy_until_sentinel(src: BinaryIO, dst: BinaryIO) -> bool:
    """
    Copy lines from src to dst byte for byte up to, but excluding, the first
    line holding the sentinel token. Returns True if the sentinel was found.
    """
    for line in src:
        if _SENTINEL_BYTES in line:
            return True
        dst.write(line)
        if not line.endswith(b"\n"):
            dst.write(b"\n")
    return False


def merge_managed_block(existing: BinaryIO, content: str, out: BinaryIO) -> bool:
    """
    Write existing bytes with the managed block replaced by content to out.
    Everything before the sentinel is kept as is; the sentinel line becomes
    the marker comment. Without a sentinel the marker and content are
    appended. Returns True if a sentinel was found.
    """
    found = _copy_until_sentinel(existing, out)
    out.write(MARKER_LINE.encode("utf-8"))
    out.write(content.encode("utf-8"))
    return found


def write_managed_block(target: Path, content: str) -> None:
    """
    Atomically rewrite target so that everything after the sentinel line is
    content. The target must already exist, even if empty.
    """
    target = Path(target)
    try:
        src = target.open("rb")
    except OSError as e:
        raise SyncError(f"Could not read {target}: {e}") from e

    tmp_path: Path | None = None
    try:
        with src, tempfile.NamedTemporaryFile(
            mode="wb",
            prefix=".hosts_",
            dir=str(target.parent),
            delete=False,
        ) as tmp:
            tmp_path = Path(tmp.name)
            found = merge_managed_block(src, content, tmp)
        os.chmod(tmp_path, HOSTS_FILE_MODE)
        os.replace(tmp_path, target)
        tmp_path = None
    except OSError as e:
        raise SyncError(f"Could not write {target}: {e}") from e
    finally:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
    LOG.debug("Managed block %s in %s", "replaced" if found else "appended", target)
