"""Content-based file identity."""
import hashlib
import logging
import os
from typing import Tuple, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


class ContentHasher:
    """Derive a stable identity for a file from its bytes."""

    def __init__(self, chunk_size: int = 1024 * 1024):
        """Initialize content hasher.

        Args:
            chunk_size: Number of bytes read per iteration
        """
        self.chunk_size = chunk_size

    def identity_of(self, path: PathLike) -> str:
        """Compute the SHA-256 hex digest of a file's content.

        When the file cannot be read (missing, permission denied, a
        directory) the digest of the path bytes is returned instead, so
        this never fails for I/O reasons.

        Args:
            path: Path of the file to identify

        Returns:
            64-character hex digest
        """
        digest = hashlib.sha256()
        try:
            with open(path, "rb") as f:
                for chunk in iter(lambda: f.read(self.chunk_size), b""):
                    digest.update(chunk)
        except OSError as e:
            logger.debug(f"Falling back to path identity for {path}: {e}")
            return self.path_identity(path)
        return digest.hexdigest()

    @staticmethod
    def path_identity(path: PathLike) -> str:
        """Digest of the path's filesystem bytes."""
        return hashlib.sha256(os.fsencode(path)).hexdigest()

    @staticmethod
    def split_path(path: PathLike) -> Tuple[str, str]:
        """Split a path into the (folder, filename) recorded on a File row.

        Bytes that are not valid UTF-8 are stored as backslash escapes so the
        names can always be written to the database.
        """
        path = os.fsencode(path)
        return (
            os.path.dirname(path).decode("utf-8", "backslashreplace"),
            os.path.basename(path).decode("utf-8", "backslashreplace"),
        )
