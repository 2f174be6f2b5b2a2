import os

import pytest

from catalog.core.errors import FileStoreError
from catalog.storage.files import LocalFileStore, best_effort_delete


def test_files_store_creates_parents_and_overwrites_success(tmp_path):
    store = LocalFileStore(str(tmp_path))
    path = store.resolve("uploads/product-thumbnails/a.jpg")

    store.store(path, b"first")
    store.store(path, b"second")

    with open(path, "rb") as fh:
        assert fh.read() == b"second"
    assert path == os.path.join(str(tmp_path), "uploads", "product-thumbnails", "a.jpg")


def test_files_delete_missing_failure(tmp_path):
    store = LocalFileStore(str(tmp_path))
    with pytest.raises(FileNotFoundError):
        store.delete(str(tmp_path / "missing.jpg"))


def test_files_best_effort_delete_success(tmp_path):
    store = LocalFileStore(str(tmp_path))
    path = store.resolve("x/y.jpg")
    store.store(path, b"data")

    assert best_effort_delete(store, path) is True
    assert not os.path.exists(path)
    # Second call logs and reports failure instead of raising
    assert best_effort_delete(store, path) is False


def test_files_resolve_outside_root_failure(tmp_path):
    store = LocalFileStore(str(tmp_path / "public"))
    with pytest.raises(FileStoreError):
        store.resolve("../secrets.txt")


def test_files_store_write_error_failure(tmp_path):
    store = LocalFileStore(str(tmp_path))
    # A regular file where a directory is needed
    (tmp_path / "blocker").write_bytes(b"")
    with pytest.raises(FileStoreError):
        store.store(str(tmp_path / "blocker" / "a.jpg"), b"data")
