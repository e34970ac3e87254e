"""Unit tests for flatdocs.documents.versions — VersionStore."""

import pytest

from flatdocs.engine.errors import AlreadyExistsError, NotFoundError


class TestSnapshot:
    def test_first_version_is_zero(self, versions):
        assert versions.snapshot("notes.txt", b"A") == 0

    def test_versions_increase(self, versions):
        assert versions.snapshot("notes.txt", b"A") == 0
        assert versions.snapshot("notes.txt", b"B") == 1
        assert versions.snapshot("notes.txt", b"C") == 2

    def test_layout(self, versions, data_dir):
        versions.snapshot("notes.txt", b"A")
        assert (data_dir / "notes.txt versions" / "0.txt").read_bytes() == b"A"

    def test_next_follows_max_not_count(self, versions, data_dir):
        history = data_dir / "notes.md versions"
        history.mkdir()
        (history / "0.md").write_bytes(b"a")
        (history / "5.md").write_bytes(b"b")
        assert versions.snapshot("notes.md", b"c") == 6

    def test_text_content_is_stored_as_utf8(self, versions, data_dir):
        assert versions.snapshot("notes.txt", "A é") == 0
        path = data_dir / "notes.txt versions" / "0.txt"
        assert path.read_bytes() == "A é".encode("utf-8")
        assert versions.snapshot("notes.txt", "B") == 1

    def test_histories_are_independent(self, versions):
        versions.snapshot("a.txt", b"1")
        versions.snapshot("a.txt", b"2")
        assert versions.snapshot("b.txt", b"1") == 0


class TestRead:
    def test_read_version(self, versions):
        versions.snapshot("notes.txt", b"A")
        versions.snapshot("notes.txt", b"B")
        assert versions.read_version("notes.txt", 0) == b"A"
        assert versions.read_version("notes.txt", 1) == b"B"

    def test_read_missing_version(self, versions):
        versions.snapshot("notes.txt", b"A")
        with pytest.raises(NotFoundError):
            versions.read_version("notes.txt", 7)

    def test_list_versions(self, versions):
        for content in (b"a", b"b", b"c"):
            versions.snapshot("notes.txt", content)
        assert sorted(versions.list_versions("notes.txt")) == [0, 1, 2]

    def test_list_without_history(self, versions):
        assert versions.list_versions("nothing.md") == []
        assert versions.latest_version("nothing.md") is None

    def test_get_snapshot(self, versions):
        versions.snapshot("notes.txt", b"A")
        snap = versions.get_snapshot("notes.txt", 0)
        assert snap.document_name == "notes.txt"
        assert snap.version == 0
        assert snap.text == "A"


class TestHistoryLifecycle:
    def test_rename_history(self, versions, data_dir):
        versions.snapshot("old.txt", b"A")
        assert versions.rename_history("old.txt", "new.txt") is True
        assert not (data_dir / "old.txt versions").exists()
        assert versions.read_version("new.txt", 0) == b"A"

    def test_rename_history_changes_extension(self, versions, data_dir):
        versions.snapshot("old.txt", b"A")
        versions.rename_history("old.txt", "new.md")
        assert (data_dir / "new.md versions" / "0.md").exists()
        assert versions.read_version("new.md", 0) == b"A"

    def test_rename_without_history(self, versions):
        assert versions.rename_history("none.txt", "other.txt") is False

    def test_rename_onto_existing_history(self, versions):
        versions.snapshot("a.txt", b"A")
        versions.snapshot("b.txt", b"B")
        with pytest.raises(AlreadyExistsError):
            versions.rename_history("a.txt", "b.txt")

    def test_rename_without_history_onto_leftover_history(self, versions, data_dir):
        versions.snapshot("b.txt", b"B")
        with pytest.raises(AlreadyExistsError):
            versions.rename_history("a.txt", "b.txt")
        assert versions.read_version("b.txt", 0) == b"B"

    def test_delete_history(self, versions, data_dir):
        versions.snapshot("notes.txt", b"A")
        assert versions.delete_history("notes.txt") is True
        assert not (data_dir / "notes.txt versions").exists()
        assert versions.delete_history("notes.txt") is False
