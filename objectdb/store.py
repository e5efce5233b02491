"""
Compressed object store
Maps digests to zlib-compressed files laid out by digest prefix
"""

import logging
import zlib
from pathlib import Path

from objectdb.digest import validate_format
from objectdb.errors import DecompressionError, NotFound, ReadingFileError, WritingFileError

logger = logging.getLogger(__name__)


class CompressedStore:
    """Loose object storage: <root>/<first 2 hex chars>/<remaining 38>"""

    def __init__(self, objects_dir, write_once: bool = False):
        """
        Args:
            objects_dir: Root directory of the object database
            write_once: Treat writing an already stored digest as an error
                instead of a no-op
        """
        self.objects_dir = Path(objects_dir)
        self.write_once = write_once

    def locate(self, sha: str) -> Path:
        """Path of the object file for sha (does not touch the filesystem)"""
        sha = sha.lower()
        return self.objects_dir / sha[:2] / sha[2:]

    def exists(self, sha: str) -> bool:
        validate_format(sha)
        return self.locate(sha).is_file()

    def read(self, sha: str) -> bytes:
        """
        Read and decompress an object

        Raises:
            InvalidFormat: sha is not a 40-char hex digest
            NotFound: no object stored under sha
            ReadingFileError: the object file exists but cannot be read
            DecompressionError: stored bytes are not a valid zlib stream
        """
        validate_format(sha)
        object_file = self.locate(sha)
        if not object_file.is_file():
            raise NotFound(f"Object {sha} not found")

        try:
            compressed = object_file.read_bytes()
        except OSError as e:
            raise ReadingFileError(f"Object {sha} could not be read: {e}") from e

        try:
            data = zlib.decompress(compressed)
        except zlib.error as e:
            raise DecompressionError(f"Failed to decompress {sha}: {e}") from e

        logger.debug("Decompressed %s (%d bytes)", sha, len(data))
        return data

    def write(self, sha: str, data: bytes) -> bool:
        """
        Compress and store data under sha

        Returns:
            True if the object was written, False if it was already stored

        Raises:
            WritingFileError: on I/O failure, or when the object already exists
                and the store is write-once
        """
        validate_format(sha)
        object_file = self.locate(sha)

        try:
            object_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WritingFileError(f"Error during the writing process : {e}") from e

        try:
            # 'x' never replaces an existing object
            f = open(object_file, "xb")
        except FileExistsError as e:
            if self.write_once:
                raise WritingFileError(f"Object {sha} already exists") from e
            logger.debug("Object %s already stored, skipping", sha)
            return False
        except OSError as e:
            raise WritingFileError(f"Error during the writing process : {e}") from e

        try:
            with f:
                f.write(zlib.compress(data))
        except OSError as e:
            # a truncated object would read back as corrupt
            try:
                object_file.unlink(missing_ok=True)
            except OSError as unlink_error:
                logger.warning("Could not remove partial object %s: %s", object_file, unlink_error)
            raise WritingFileError(f"Error during the writing process : {e}") from e

        logger.debug("File written to: %s", object_file)
        return True
