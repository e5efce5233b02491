"""
Core Repository class for objectdb
Caller-facing operations over one object database, reported as result dicts
"""

import logging
import os
from pathlib import Path

from objectdb import codec
from objectdb.builder import CommitBuilder, TreeBuilder, read_blob
from objectdb.constants import METADATA_DIR, OBJECTS_DIR
from objectdb.errors import ObjectDBError, ObjectParseError
from objectdb.objects import Blob, Identity, Tree
from objectdb.store import CompressedStore

logger = logging.getLogger(__name__)

NOT_INITIALIZED = {
    "success": False,
    "error": "NotInitialized",
    "message": "Not an objectdb repository",
}


def _failure(action: str, error: ObjectDBError) -> dict:
    logger.error("Error %s: %s", action, error)
    return {
        "success": False,
        "error": error.code,
        "message": f"Error {action}: {error}",
    }


class Repository:
    """Represents an object database rooted in a working directory"""

    def __init__(
        self,
        work_dir: str = None,
        identity: Identity = None,
        write_once: bool = False,
        metadata_dir: str = METADATA_DIR,
    ):
        """
        Initialize repository object for given directory

        Args:
            work_dir: Working directory (defaults to current directory)
            identity: Author/committer written into commits
            write_once: Fail when an object is written twice instead of
                skipping the second write
            metadata_dir: Name of the metadata directory holding the objects
        """
        self.work_dir = Path(work_dir or os.getcwd())
        self.metadata_dir = self.work_dir / metadata_dir
        self.objects_dir = self.metadata_dir / OBJECTS_DIR
        self.store = CompressedStore(self.objects_dir, write_once=write_once)
        self.tree_builder = TreeBuilder(self.store, metadata_dir=metadata_dir)
        self.commit_builder = CommitBuilder(self.store, identity=identity)

    def is_initialized(self) -> bool:
        """Check if the object directory exists"""
        return self.objects_dir.is_dir()

    def initialize(self) -> dict:
        """
        Create the object directory

        Returns:
            dict with status information
        """
        if self.is_initialized():
            return {
                "success": True,
                "message": "Repository already initialized",
                "idempotent": True,
            }

        try:
            self.objects_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return {
                "success": False,
                "error": "WritingFileError",
                "message": f"Failed to initialize repository: {e}",
            }

        return {
            "success": True,
            "message": f"Initialized empty object database in {self.objects_dir}",
            "idempotent": False,
        }

    # ===================== READ =====================

    def get_blob(self, sha: str) -> dict:
        """
        Read a stored blob

        Returns:
            dict with "blob" on success, "error" code otherwise
        """
        if not self.is_initialized():
            return dict(NOT_INITIALIZED)

        try:
            blob = Blob.decode(self.store.read(sha))
        except ObjectDBError as e:
            return _failure("reading blob", e)

        logger.debug("Blob %s successfully parsed and validated", sha)
        return {"success": True, "message": f"Read blob {blob.digest[:8]}", "blob": blob}

    def get_tree(self, sha: str) -> dict:
        """
        Read a stored tree

        Returns:
            dict with "tree" on success, "error" code otherwise
        """
        if not self.is_initialized():
            return dict(NOT_INITIALIZED)

        try:
            tree = Tree.decode(self.store.read(sha))
        except ObjectDBError as e:
            return _failure("reading tree", e)

        logger.debug("Tree %s successfully parsed and validated", sha)
        return {"success": True, "message": f"Read tree {tree.digest[:8]}", "tree": tree}

    def read_object(self, sha: str) -> dict:
        """Read any stored object as its type and raw payload"""
        if not self.is_initialized():
            return dict(NOT_INITIALIZED)

        try:
            data = self.store.read(sha)
            try:
                obj_type, payload = codec.parse_header(data)
            except ValueError as e:
                raise ObjectParseError(f"Failed to parse object {sha} : {e}") from e
        except ObjectDBError as e:
            return _failure("reading object", e)

        return {
            "success": True,
            "message": f"Read {obj_type} {sha[:8]}",
            "type": obj_type,
            "size": len(payload),
            "payload": payload,
        }

    def has_object(self, sha: str) -> dict:
        """Check whether an object is stored, without reading it"""
        if not self.is_initialized():
            return dict(NOT_INITIALIZED)

        try:
            exists = self.store.exists(sha)
        except ObjectDBError as e:
            return _failure("checking object", e)

        return {
            "success": True,
            "message": f"Object {sha[:8]} {'exists' if exists else 'is missing'}",
            "exists": exists,
        }

    # ===================== WRITE =====================

    def generate_blob(self, path) -> dict:
        """Load a file as a blob without storing it"""
        try:
            blob = read_blob(path)
        except ObjectDBError as e:
            return _failure("generating blob", e)

        return {"success": True, "message": f"Generated blob {blob.digest[:8]}", "blob": blob}

    def write_blob(self, blob: Blob) -> dict:
        """Persist a blob; "written" is False when it was already stored"""
        if not self.is_initialized():
            return dict(NOT_INITIALIZED)

        try:
            written = self.store.write(blob.digest, blob.serialize())
        except ObjectDBError as e:
            return _failure("writing blob", e)

        return {
            "success": True,
            "message": f"Wrote blob {blob.digest[:8]}",
            "sha": blob.digest,
            "written": written,
        }

    def hash_file(self, path, write: bool = False) -> dict:
        """Compute a file's blob digest, optionally storing the blob"""
        result = self.generate_blob(path)
        if not result["success"] or not write:
            return result

        blob = result["blob"]
        write_result = self.write_blob(blob)
        if not write_result["success"]:
            return write_result
        return {**write_result, "blob": blob}

    def write_tree(self, path=None) -> dict:
        """
        Store the snapshot of path (defaults to the working directory)

        Returns:
            dict with "tree" on success, "error" code otherwise
        """
        if not self.is_initialized():
            return dict(NOT_INITIALIZED)

        try:
            tree = self.tree_builder.build_tree(path or self.work_dir)
        except ObjectDBError as e:
            return _failure("writing tree", e)

        return {
            "success": True,
            "message": f"Wrote tree {tree.digest[:8]}",
            "sha": tree.digest,
            "tree": tree,
        }

    def commit_tree(self, tree_sha: str, parent_sha: str = None, message: str = "") -> dict:
        """
        Store a commit of tree_sha with an optional parent

        Returns:
            dict with "sha" and "commit" on success, "error" code otherwise
        """
        if not self.is_initialized():
            return dict(NOT_INITIALIZED)

        try:
            commit = self.commit_builder.build_commit(tree_sha, parent_sha, message)
        except ObjectDBError as e:
            return _failure("creating commit", e)

        return {
            "success": True,
            "message": f"Created commit {commit.digest[:8]}",
            "sha": commit.digest,
            "commit": commit,
        }
