"""
Test suite for the compressed object store.
"""

import unittest
import zlib
from pathlib import Path
from unittest import mock

from objectdb.errors import (
    DecompressionError,
    InvalidFormat,
    NotFound,
    ReadingFileError,
    WritingFileError,
)
from objectdb.objects import Blob
from objectdb.store import CompressedStore
from tests.test_base import ObjectDBTestBase, chmod_supported


class TestLocate(ObjectDBTestBase):
    """Test cases for CompressedStore.locate."""

    def test_two_level_layout(self):
        store = CompressedStore(self.objects_dir)
        sha = "ab" + "c" * 38
        path = store.locate(sha)
        self.assertEqual(path.parent.name, "ab")
        self.assertEqual(path.name, "c" * 38)
        self.assertEqual(path.parent.parent, self.objects_dir)

    def test_locate_does_not_create_anything(self):
        store = CompressedStore(self.objects_dir)
        store.locate("ab" + "c" * 38)
        self.assertEqual(list(self.objects_dir.iterdir()), [])


class TestReadWrite(ObjectDBTestBase):
    """Test cases for reading and writing objects."""

    def setUp(self):
        super().setUp()
        self.store = CompressedStore(self.objects_dir)
        self.blob = Blob(b"hello")

    def test_write_then_read(self):
        self.assertTrue(self.store.write(self.blob.digest, self.blob.serialize()))
        self.assertEqual(self.store.read(self.blob.digest), b"blob 5\x00hello")

    def test_stored_bytes_are_zlib_compressed(self):
        self.store.write(self.blob.digest, self.blob.serialize())
        raw = self.store.locate(self.blob.digest).read_bytes()
        self.assertEqual(zlib.decompress(raw), self.blob.serialize())

    def test_write_creates_prefix_directory(self):
        self.store.write(self.blob.digest, self.blob.serialize())
        self.assertTrue((self.objects_dir / self.blob.digest[:2]).is_dir())
        self.assertEqual(self.stored_objects(), [self.blob.digest])

    def test_read_uppercase_digest(self):
        """Digests are case-insensitive; files are named in lowercase."""
        self.store.write(self.blob.digest.upper(), self.blob.serialize())
        self.assertEqual(self.stored_objects(), [self.blob.digest])
        self.assertTrue(self.store.exists(self.blob.digest.upper()))
        self.assertEqual(self.store.read(self.blob.digest.upper()), self.blob.serialize())

    def test_read_missing_object(self):
        with self.assertRaises(NotFound):
            self.store.read("0" * 40)

    def test_read_invalid_digest_never_touches_filesystem(self):
        with self.assertRaises(InvalidFormat):
            self.store.read("../../etc/passwd")

    def test_write_invalid_digest(self):
        with self.assertRaises(InvalidFormat):
            self.store.write("not-a-digest", b"data")
        self.assertEqual(list(self.objects_dir.iterdir()), [])

    def test_read_corrupt_object(self):
        path = self.store.locate(self.blob.digest)
        path.parent.mkdir(parents=True)
        path.write_bytes(b"definitely not zlib")
        with self.assertRaises(DecompressionError) as ctx:
            self.store.read(self.blob.digest)
        self.assertEqual(ctx.exception.code, "DecompressionError")

    def test_exists(self):
        self.assertFalse(self.store.exists(self.blob.digest))
        self.store.write(self.blob.digest, self.blob.serialize())
        self.assertTrue(self.store.exists(self.blob.digest))

    def test_exists_invalid_digest(self):
        with self.assertRaises(InvalidFormat):
            self.store.exists("zz")

    @unittest.skipUnless(chmod_supported(), "permissions are not enforced for root")
    def test_read_unreadable_object(self):
        """An object that exists but cannot be opened is not reported as missing."""
        self.store.write(self.blob.digest, self.blob.serialize())
        path = self.store.locate(self.blob.digest)
        path.chmod(0o000)
        try:
            with self.assertRaises(ReadingFileError) as ctx:
                self.store.read(self.blob.digest)
            self.assertEqual(ctx.exception.code, "ReadingFileError")
        finally:
            path.chmod(0o600)

    def test_failed_write_leaves_no_partial_object(self):
        with mock.patch("objectdb.store.zlib.compress", side_effect=OSError("disk full")):
            with self.assertRaises(WritingFileError):
                self.store.write(self.blob.digest, self.blob.serialize())
        self.assertFalse(self.store.locate(self.blob.digest).exists())

    def test_failed_cleanup_still_reports_writing_error(self):
        with mock.patch("objectdb.store.zlib.compress", side_effect=OSError("disk full")), \
                mock.patch.object(Path, "unlink", side_effect=OSError("busy")):
            with self.assertLogs("objectdb.store", level="WARNING"):
                with self.assertRaises(WritingFileError):
                    self.store.write(self.blob.digest, self.blob.serialize())

    @unittest.skipUnless(chmod_supported(), "permissions are not enforced for root")
    def test_write_into_read_only_directory(self):
        self.objects_dir.chmod(0o500)
        try:
            with self.assertRaises(WritingFileError):
                self.store.write(self.blob.digest, self.blob.serialize())
        finally:
            self.objects_dir.chmod(0o700)


class TestWritePolicy(ObjectDBTestBase):
    """Test cases for repeated writes of the same digest."""

    def test_same_content_same_location(self):
        first = Blob(b"same content")
        second = Blob(b"same content")
        store = CompressedStore(self.objects_dir)
        self.assertEqual(first.digest, second.digest)
        self.assertEqual(store.locate(first.digest), store.locate(second.digest))

    def test_idempotent_by_default(self):
        """A second write of the same object is a no-op."""
        store = CompressedStore(self.objects_dir)
        blob = Blob(b"twice")
        self.assertTrue(store.write(blob.digest, blob.serialize()))
        self.assertFalse(store.write(blob.digest, blob.serialize()))
        self.assertEqual(self.stored_objects(), [blob.digest])
        self.assertEqual(store.read(blob.digest), blob.serialize())

    def test_existing_object_is_never_overwritten(self):
        store = CompressedStore(self.objects_dir)
        blob = Blob(b"original")
        store.write(blob.digest, blob.serialize())
        store.write(blob.digest, b"something else")
        self.assertEqual(store.read(blob.digest), blob.serialize())

    def test_write_once_rejects_second_write(self):
        store = CompressedStore(self.objects_dir, write_once=True)
        blob = Blob(b"twice")
        store.write(blob.digest, blob.serialize())
        with self.assertRaises(WritingFileError):
            store.write(blob.digest, blob.serialize())
        self.assertEqual(store.read(blob.digest), blob.serialize())


if __name__ == '__main__':
    unittest.main()
