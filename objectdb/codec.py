"""
Object codec
Byte-exact encoding of blob, tree and commit objects

Every object is framed as "<type> <size>\\0<payload>". The framed bytes are
exactly what gets hashed and exactly what gets stored.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from objectdb.constants import (
    BLOB_TYPE,
    COMMIT_TYPE,
    DIRECTORY_MODE,
    RAW_SHA_LENGTH,
    TREE_TYPE,
)
from objectdb.digest import from_raw, to_raw, validate_format

logger = logging.getLogger(__name__)

PATH_ENCODING = "utf-8"
PATH_ERRORS = "surrogateescape"

TREE_KIND = "tree"
BLOB_KIND = "blob"
UNKNOWN_KIND = "unknown"


def encode_path(path: str) -> bytes:
    return path.encode(PATH_ENCODING, PATH_ERRORS)


def decode_path(raw: bytes) -> str:
    return raw.decode(PATH_ENCODING, PATH_ERRORS)


def frame(obj_type: str, payload: bytes) -> bytes:
    """Prepend the "<type> <size>\\0" header to payload"""
    return f"{obj_type} {len(payload)}\0".encode("ascii") + payload


def parse_header(data: bytes, expected_type: Optional[str] = None) -> Tuple[str, bytes]:
    """
    Split framed object bytes into (type, payload)

    The header ends at the first NUL byte and must hold exactly two
    space-separated tokens; the second must be the decimal length of the
    payload that follows.

    Raises:
        ValueError: on any framing problem
    """
    boundary = data.find(b"\0")
    if boundary < 0:
        raise ValueError("missing header terminator")

    header = data[:boundary].decode("ascii")
    parts = header.split(" ")
    if len(parts) != 2:
        raise ValueError(f"malformed header {header!r}")

    obj_type, size = parts
    if expected_type is not None and obj_type != expected_type:
        raise ValueError(f"expected a {expected_type} object, got {obj_type!r}")
    if not (size.isascii() and size.isdigit()):
        raise ValueError(f"invalid object size {size!r}")

    payload = data[boundary + 1:]
    if int(size) != len(payload):
        raise ValueError(f"header declares {size} bytes but payload has {len(payload)}")

    return obj_type, payload


# ===================== BLOB =====================

def encode_blob(content: bytes) -> bytes:
    return frame(BLOB_TYPE, content)


# ===================== TREE =====================

def correct_mode(mode: str) -> str:
    """Directory mode is written without its leading zero"""
    return DIRECTORY_MODE if mode == "0" + DIRECTORY_MODE else mode


def classify_mode(mode: str) -> str:
    if mode in (DIRECTORY_MODE, "0" + DIRECTORY_MODE):
        return TREE_KIND
    if mode.startswith("100"):
        return BLOB_KIND
    return UNKNOWN_KIND


def tree_sort_key(entry) -> bytes:
    # plain byte-wise order, directories get no trailing "/"
    return encode_path(entry.path)


def encode_tree(entries: Iterable) -> bytes:
    """
    Serialize tree entries (anything with path, mode and sha attributes)

    Entries are written in tree_sort_key order as
    "<mode> <path>\\0<20 raw digest bytes>".
    """
    lines = []
    for entry in sorted(entries, key=tree_sort_key):
        lines.append(correct_mode(entry.mode).encode("ascii") + b" " + encode_path(entry.path) + b"\0")
        lines.append(to_raw(entry.sha))

    payload = b"".join(lines)
    logger.debug("Serialized %d tree entries (%d bytes)", len(lines) // 2, len(payload))
    return frame(TREE_TYPE, payload)


def parse_tree_payload(payload: bytes) -> List[Tuple[str, str, str]]:
    """
    Parse the entry section of a tree into (mode, path, sha) tuples

    Raises:
        ValueError: on truncated or malformed entries
    """
    entries = []
    index = 0
    while index < len(payload):
        space_index = payload.find(b" ", index)
        if space_index < 0:
            raise ValueError(f"missing mode terminator at offset {index}")
        null_index = payload.find(b"\0", space_index)
        if null_index < 0:
            raise ValueError(f"missing path terminator at offset {space_index}")

        sha_end = null_index + 1 + RAW_SHA_LENGTH
        if sha_end > len(payload):
            raise ValueError(f"truncated digest at offset {null_index + 1}")

        mode = payload[index:space_index].decode("ascii")
        path = decode_path(payload[space_index + 1:null_index])
        sha = from_raw(payload[null_index + 1:sha_end])
        entries.append((mode, path, sha))

        index = sha_end

    return entries


# ===================== COMMIT =====================

def encode_commit(
    tree_sha: str,
    parent_sha: Optional[str],
    author_name: str,
    author_email: str,
    timestamp: int,
    tz_offset: str,
    message: str,
) -> bytes:
    """Serialize a commit; the parent line is omitted for a root commit"""
    validate_format(tree_sha)
    signature = f"{author_name} <{author_email}> {timestamp} {tz_offset}"

    lines = [f"tree {tree_sha}"]
    if parent_sha:
        validate_format(parent_sha)
        lines.append(f"parent {parent_sha}")
    lines.append(f"author {signature}")
    lines.append(f"committer {signature}")
    lines.append("")
    lines.append(message)

    body = "".join(line + "\n" for line in lines)
    return frame(COMMIT_TYPE, body.encode("utf-8"))
