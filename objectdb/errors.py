"""
Error types raised by the object database
"""


class ObjectDBError(Exception):
    """Base class for every failure the object database reports"""

    code = "ObjectDBError"
    default_message = "Object database error"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class InvalidFormat(ObjectDBError):
    code = "InvalidFormat"
    default_message = "The SHA-1 hash must be exactly 40 hexadecimal characters long."


class NotFound(ObjectDBError):
    code = "NotFound"
    default_message = "Not Found"


class DecompressionError(ObjectDBError):
    code = "DecompressionError"
    default_message = "Failed to decompress"


class WritingFileError(ObjectDBError):
    code = "WritingFileError"
    default_message = "Error during the writing process"


class ObjectParseError(ObjectDBError):
    code = "ObjectParseError"
    default_message = "Failed to parse object header"


class BlobParseError(ObjectParseError):
    code = "BlobParseError"
    default_message = "Failed to parse blob header or length mismatch."


class TreeParseError(ObjectParseError):
    code = "TreeParseError"
    default_message = "Error during the parsing of a tree"


class ReadingFileError(ObjectDBError):
    code = "ReadingFileError"
    default_message = "Error while reading a working-tree file"
