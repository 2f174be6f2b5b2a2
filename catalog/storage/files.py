import os
import structlog

from ..core.errors import FileStoreError

"""Local file store for files served from the public static root."""

logger = structlog.get_logger()


class LocalFileStore:
    """Byte storage keyed by filesystem path, rooted at the public directory.

    There is no locking: writes to the same path are last-writer-wins.
    """

    def __init__(self, root: str):
        self.root = os.path.abspath(root)

    def resolve(self, reference: str) -> str:
        """Turn a reference path (relative to the root) into a full path."""
        full = os.path.abspath(os.path.join(self.root, *reference.split("/")))
        if os.path.commonpath([full, self.root]) != self.root:
            raise FileStoreError(f"path escapes store root: {reference}")
        return full

    def store(self, path: str, data: bytes) -> None:
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "wb") as fh:
                fh.write(data)
        except OSError as e:
            raise FileStoreError(f"could not write {path}: {e}") from e
        logger.info("file stored", path=path, size=len(data))

    def delete(self, path: str) -> None:
        # FileNotFoundError is left to the caller
        os.remove(path)
        logger.info("file deleted", path=path)


def best_effort_delete(store: LocalFileStore, path: str) -> bool:
    """Delete `path`, logging instead of raising on failure.

    Returns whether the file was removed. Used for cleanup that must never
    block the record update around it.
    """
    try:
        store.delete(path)
    except OSError as e:
        logger.warning("file cleanup failed", path=path, error=str(e))
        return False
    return True
