"""Unit tests for flatdocs.documents.store — DocumentStore."""

import pytest

from flatdocs.engine.errors import (
    AlreadyExistsError,
    NotFoundError,
    UnsupportedExtensionError,
)


class TestList:
    def test_empty(self, store):
        assert store.list() == []

    def test_missing_root(self, tmp_path):
        from flatdocs.documents.store import DocumentStore

        assert DocumentStore(tmp_path / "nope").list() == []

    def test_files_only(self, store, data_dir, create_document):
        create_document("about.md")
        create_document("changes.txt")
        (data_dir / "about.md versions").mkdir()
        assert sorted(store.list()) == ["about.md", "changes.txt"]

    @pytest.mark.parametrize("name", ["a.txt", "b.md", "new file.txt"])
    def test_create_then_list_once(self, store, name):
        store.create(name)
        assert store.list().count(name) == 1


class TestReadWrite:
    def test_read(self, store, create_document):
        create_document("about.txt", "abc 123")
        assert store.read("about.txt") == b"abc 123"

    def test_read_missing(self, store):
        with pytest.raises(NotFoundError, match="foo.txt does not exist."):
            store.read("foo.txt")

    def test_write_creates(self, store):
        store.write("notes.txt", "hello")
        assert store.exists("notes.txt")
        assert store.read("notes.txt") == b"hello"

    def test_write_overwrites(self, store):
        store.write("notes.txt", b"first")
        store.write("notes.txt", b"second")
        assert store.read("notes.txt") == b"second"

    def test_write_rejects_unsupported(self, store, data_dir):
        with pytest.raises(UnsupportedExtensionError):
            store.write("notes.exe", b"x")
        assert not (data_dir / "notes.exe").exists()

    def test_get_document(self, store, create_document):
        create_document("about.md", "# Hi")
        doc = store.get("about.md")
        assert doc.name == "about.md"
        assert doc.extension == "md"
        assert doc.content_type == "text/markdown"
        assert doc.text == "# Hi"
        assert doc.modified_at is not None


class TestCreate:
    def test_create_empty(self, store):
        store.create("new.md")
        assert store.read("new.md") == b""

    def test_create_existing_never_clobbers(self, store, create_document):
        create_document("about.md", "keep me")
        with pytest.raises(AlreadyExistsError):
            store.create("about.md")
        assert store.read("about.md") == b"keep me"


class TestRename:
    def test_rename(self, store, create_document):
        create_document("old.txt", "x")
        store.rename("old.txt", "new.txt")
        assert not store.exists("old.txt")
        assert store.read("new.txt") == b"x"

    def test_rename_missing(self, store):
        with pytest.raises(NotFoundError):
            store.rename("ghost.txt", "new.txt")

    def test_rename_onto_existing(self, store, create_document):
        create_document("a.txt", "a")
        create_document("b.txt", "b")
        with pytest.raises(AlreadyExistsError):
            store.rename("a.txt", "b.txt")
        assert store.read("b.txt") == b"b"
        assert store.read("a.txt") == b"a"


class TestDelete:
    def test_delete(self, store, create_document):
        create_document("about.txt")
        store.delete("about.txt")
        assert not store.exists("about.txt")

    def test_delete_is_idempotent(self, store, create_document):
        create_document("about.txt")
        store.delete("about.txt")
        store.delete("about.txt")
        store.delete("never-existed.md")
