"""
Global constants for objectdb
"""

METADATA_DIR = ".git"
OBJECTS_DIR = "objects"

SHA_LENGTH = 40
RAW_SHA_LENGTH = 20

FILE_MODE = "100644"
DIRECTORY_MODE = "40000"

BLOB_TYPE = "blob"
TREE_TYPE = "tree"
COMMIT_TYPE = "commit"

DEFAULT_AUTHOR_NAME = "Author Name"
DEFAULT_AUTHOR_EMAIL = "author@example.com"
AUTHOR_NAME_ENV = "OBJECTDB_AUTHOR_NAME"
AUTHOR_EMAIL_ENV = "OBJECTDB_AUTHOR_EMAIL"
