"""
objectdb: a git-compatible content-addressable object store

Stores blobs, trees and commits under their SHA-1 digest, zlib-compressed,
in the same on-disk layout git uses for loose objects.
"""

__version__ = "0.1.0"
