"""
Objects module for objectdb
Blob, tree and commit value objects
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

from objectdb import codec
from objectdb.constants import (
    BLOB_TYPE,
    DEFAULT_AUTHOR_EMAIL,
    DEFAULT_AUTHOR_NAME,
    DIRECTORY_MODE,
    FILE_MODE,
    TREE_TYPE,
)
from objectdb.digest import digest_of, validate_format
from objectdb.errors import BlobParseError, TreeParseError


@dataclass(frozen=True)
class Blob:
    """Raw file content; digest covers the framed form, not the bare content"""

    content: bytes
    digest: str = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "content", bytes(self.content))
        object.__setattr__(self, "digest", digest_of(self.serialize()))

    def serialize(self) -> bytes:
        return codec.encode_blob(self.content)

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_file(cls, file_path) -> "Blob":
        """Read a file's bytes into a blob (raises OSError on read failure)"""
        return cls(Path(file_path).read_bytes())

    @classmethod
    def decode(cls, data: bytes) -> "Blob":
        """
        Rehydrate a blob from its framed bytes

        Raises:
            BlobParseError: header is malformed or the length does not match
        """
        try:
            _, payload = codec.parse_header(data, expected_type=BLOB_TYPE)
        except ValueError as e:
            raise BlobParseError(f"Failed to parse to blob : {e}") from e
        return cls(payload)


@dataclass(frozen=True)
class TreeEntry:
    """One child of a tree: a name segment, its mode and the referenced digest"""

    path: str
    sha: str
    mode: str

    def __post_init__(self):
        if not self.path or "/" in self.path or "\0" in self.path:
            raise ValueError(f"Invalid tree entry name {self.path!r}")
        if not self.mode:
            raise ValueError(f"Tree entry {self.path!r} has an empty mode")
        validate_format(self.sha)
        object.__setattr__(self, "sha", self.sha.lower())

    @property
    def kind(self) -> str:
        return codec.classify_mode(self.mode)


@dataclass(frozen=True)
class FileEntry(TreeEntry):
    mode: str = FILE_MODE


@dataclass(frozen=True)
class DirectoryEntry(TreeEntry):
    mode: str = DIRECTORY_MODE


def make_entry(path: str, sha: str, mode: str) -> TreeEntry:
    """Build the entry variant matching mode"""
    kind = codec.classify_mode(mode)
    if kind == codec.TREE_KIND:
        return DirectoryEntry(path=path, sha=sha, mode=mode)
    if kind == codec.BLOB_KIND:
        return FileEntry(path=path, sha=sha, mode=mode)
    return TreeEntry(path=path, sha=sha, mode=mode)


@dataclass(frozen=True)
class Tree:
    """
    A directory snapshot

    Freshly built trees keep their entries in serialization order, so two
    trees built from the same entries in any order compare equal and share a
    digest. Decoded trees keep the stored order and bytes as they are.
    """

    entries: Tuple[TreeEntry, ...] = ()
    stored: Optional[bytes] = field(default=None, repr=False, compare=False)
    digest: str = field(init=False)

    def __post_init__(self):
        if self.stored is None:
            entries = tuple(sorted(self.entries, key=codec.tree_sort_key))
        else:
            entries = tuple(self.entries)
        seen = set()
        for entry in entries:
            if entry.path in seen:
                raise ValueError(f"Duplicate tree entry {entry.path!r}")
            seen.add(entry.path)
        object.__setattr__(self, "entries", entries)
        object.__setattr__(self, "digest", digest_of(self.serialize()))

    def serialize(self) -> bytes:
        if self.stored is not None:
            return self.stored
        return codec.encode_tree(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def __len__(self):
        return len(self.entries)

    def get(self, path: str) -> Optional[TreeEntry]:
        for entry in self.entries:
            if entry.path == path:
                return entry
        return None

    @classmethod
    def decode(cls, data: bytes) -> "Tree":
        """
        Rehydrate a tree from its framed bytes

        Entry order and mode spelling are taken as stored, so the digest is
        always that of data.

        Raises:
            TreeParseError: on any header or entry framing problem
        """
        try:
            _, payload = codec.parse_header(data, expected_type=TREE_TYPE)
            entries = [
                make_entry(path, sha, mode)
                for mode, path, sha in codec.parse_tree_payload(payload)
            ]
            return cls(entries, stored=bytes(data))
        except ValueError as e:
            raise TreeParseError(f"Failed to parse to tree : {e}") from e


@dataclass(frozen=True)
class Identity:
    """Author/committer identity written into commits"""

    name: str = DEFAULT_AUTHOR_NAME
    email: str = DEFAULT_AUTHOR_EMAIL

    def __post_init__(self):
        for value in (self.name, self.email):
            if any(c in value for c in "<>\n"):
                raise ValueError(f"Invalid identity component {value!r}")


def _format_offset(moment: datetime) -> str:
    return moment.strftime("%z") or "+0000"


@dataclass(frozen=True)
class Commit:
    """A snapshot: tree digest, optional parent, authorship and message"""

    tree: str
    parent: Optional[str]
    identity: Identity
    timestamp: int
    tz_offset: str
    message: str
    digest: str = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "digest", digest_of(self.serialize()))

    @property
    def is_root(self) -> bool:
        return not self.parent

    def serialize(self) -> bytes:
        return codec.encode_commit(
            self.tree,
            self.parent,
            self.identity.name,
            self.identity.email,
            self.timestamp,
            self.tz_offset,
            self.message,
        )

    @classmethod
    def create(
        cls,
        tree: str,
        parent: Optional[str],
        message: str,
        identity: Identity = None,
        now: datetime = None,
    ) -> "Commit":
        """Build a commit stamped with the current local time (captured once)"""
        moment = now or datetime.now(timezone.utc).astimezone()
        if moment.tzinfo is None:
            moment = moment.astimezone()
        return cls(
            tree=tree,
            parent=parent or None,
            identity=identity or Identity(),
            timestamp=int(moment.timestamp()),
            tz_offset=_format_offset(moment),
            message=message,
        )
