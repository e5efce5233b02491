"""
Tree and commit builders
Turn a directory snapshot into stored blob/tree objects, and trees into commits
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

from objectdb.constants import METADATA_DIR
from objectdb.digest import validate_format
from objectdb.errors import NotFound, ReadingFileError
from objectdb.objects import Blob, Commit, DirectoryEntry, FileEntry, Identity, Tree
from objectdb.store import CompressedStore

logger = logging.getLogger(__name__)


def list_files(directory) -> List[Path]:
    """Immediate regular files of directory (symlinks to files included)"""
    with os.scandir(directory) as it:
        return [Path(entry.path) for entry in it if entry.is_file()]


def list_subdirectories(directory, exclude: str = METADATA_DIR) -> List[Path]:
    """Immediate subdirectories of directory, skipping exclude and symlinks"""
    with os.scandir(directory) as it:
        return [
            Path(entry.path)
            for entry in it
            if entry.is_dir(follow_symlinks=False) and entry.name != exclude
        ]


def read_blob(file_path) -> Blob:
    """
    Load a file into a blob without storing it

    Raises:
        NotFound: the file does not exist
        ReadingFileError: the file exists but cannot be read
    """
    try:
        blob = Blob.from_file(file_path)
    except FileNotFoundError as e:
        raise NotFound(f"File {file_path} not found") from e
    except OSError as e:
        raise ReadingFileError(f"Error while reading {file_path} : {e}") from e

    logger.debug("File content length: %d", blob.size)
    return blob


class TreeBuilder:
    """Builds tree objects bottom-up from a live directory"""

    def __init__(self, store: CompressedStore, metadata_dir: str = METADATA_DIR):
        self.store = store
        self.metadata_dir = metadata_dir

    def write_blob(self, blob: Blob) -> Blob:
        self.store.write(blob.digest, blob.serialize())
        return blob

    def build_tree(self, directory) -> Tree:
        """
        Store every file and subdirectory of directory and return its tree

        Children are written before the parent is hashed, since the parent's
        bytes embed their digests. The first failure aborts the whole build
        and the tree being assembled is never stored.
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise NotFound(f"Directory {directory} not found")

        try:
            files = list_files(directory)
            subdirectories = list_subdirectories(directory, exclude=self.metadata_dir)
        except OSError as e:
            raise ReadingFileError(f"Error while listing {directory} : {e}") from e

        entries = []
        for file_path in files:
            blob = self.write_blob(read_blob(file_path))
            entries.append(FileEntry(path=file_path.name, sha=blob.digest))
        logger.debug("%s: %d files processed", directory, len(files))

        for subdirectory in subdirectories:
            subtree = self.build_tree(subdirectory)
            entries.append(DirectoryEntry(path=subdirectory.name, sha=subtree.digest))
        logger.debug("%s: %d directories processed", directory, len(subdirectories))

        tree = Tree(entries)
        self.store.write(tree.digest, tree.serialize())
        logger.debug("Tree %s written for %s", tree.digest, directory)
        return tree


class CommitBuilder:
    """Assembles and stores commit objects for a fixed identity"""

    def __init__(self, store: CompressedStore, identity: Identity = None):
        self.store = store
        self.identity = identity or Identity()

    def build_commit(self, tree_sha: str, parent_sha: Optional[str], message: str) -> Commit:
        """
        Store a commit of tree_sha on top of parent_sha (None for a root commit)

        Raises:
            InvalidFormat: tree_sha or parent_sha is not a valid digest
            WritingFileError: the commit could not be stored
        """
        validate_format(tree_sha)
        if parent_sha:
            validate_format(parent_sha)

        commit = Commit.create(tree_sha.lower(), parent_sha.lower() if parent_sha else None, message, self.identity)
        self.store.write(commit.digest, commit.serialize())
        logger.debug("Commit %s written (tree %s, parent %s)", commit.digest, tree_sha, parent_sha)
        return commit
