"""
Integration tests — end-to-end user workflows.

Each test drives the services the way a route layer would: one session
bag per browser, messages read back from ``session["message"]``.
"""

import pytest

from flatdocs.engine.errors import (
    AlreadyExistsError,
    AuthRequiredError,
    InvalidCredentialsError,
    NotFoundError,
)


@pytest.mark.integration
class TestBrowsing:
    def test_index_lists_documents(self, repo):
        assert repo.documents.list_documents() == ["about.md", "changes.txt", "history.txt"]

    def test_view_text_and_markdown(self, repo):
        assert "2015 - Ruby 2.3 released." in repo.documents.view("history.txt").text
        assert repo.documents.view("about.md").is_markdown is True

    def test_missing_document_message(self, repo):
        with pytest.raises(NotFoundError) as exc:
            repo.documents.view("notafile.txt")
        assert exc.value.message == "notafile.txt does not exist."


@pytest.mark.integration
class TestSignedInWorkflow:
    def test_login_edit_logout(self, repo):
        session = {}
        repo.accounts.login(session, "admin", "secret")
        assert session["message"] == "Welcome!"

        repo.documents.edit(session, "changes.txt", "new content")
        assert session["message"] == "changes.txt has been updated."
        assert repo.documents.view("changes.txt").text == "new content"
        assert repo.documents.read_version("changes.txt", 0).text == ""

        repo.accounts.logout(session)
        assert session["message"] == "You have been signed out."
        with pytest.raises(AuthRequiredError):
            repo.documents.edit(session, "changes.txt", "again")

    def test_create_duplicate_delete(self, repo):
        session = {}
        repo.accounts.login(session, "admin", "secret")

        repo.documents.create(session, "test.txt")
        assert session["message"] == "test.txt was created."

        repo.documents.duplicate(session, "about.md")
        repo.documents.duplicate(session, "about.md")
        assert "about(2).md" in repo.documents.list_documents()

        repo.documents.delete(session, "test.txt")
        assert session["message"] == "test.txt was deleted."
        assert "test.txt" not in repo.documents.list_documents()

    def test_create_existing_rejected(self, repo):
        session = {}
        repo.accounts.login(session, "admin", "secret")
        with pytest.raises(AlreadyExistsError):
            repo.documents.create(session, "about.md")
        assert repo.documents.view("about.md").text == "# Ruby is..."


@pytest.mark.integration
class TestAnonymousVisitor:
    @pytest.mark.parametrize(
        "action",
        [
            lambda docs, s: docs.create(s, "test.txt"),
            lambda docs, s: docs.edit(s, "changes.txt", "x"),
            lambda docs, s: docs.delete(s, "changes.txt"),
            lambda docs, s: docs.duplicate(s, "about.md"),
            lambda docs, s: docs.rename(s, "about.md", "ruby.md"),
        ],
    )
    def test_mutations_rejected(self, repo, action):
        before = {
            name: repo.documents.view(name).content
            for name in repo.documents.list_documents()
        }
        with pytest.raises(AuthRequiredError) as exc:
            action(repo.documents, {})
        assert exc.value.message == "You must be signed in to do that."
        after = {
            name: repo.documents.view(name).content
            for name in repo.documents.list_documents()
        }
        assert after == before


@pytest.mark.integration
class TestAccounts:
    def test_signup_then_edit(self, repo):
        session = {}
        repo.accounts.register(session, "john", "deer")
        assert session["message"] == "Your account has been registered."
        repo.documents.edit(session, "history.txt", "2016 - Ruby 2.4")
        assert repo.documents.view("history.txt").text == "2016 - Ruby 2.4"

    def test_bad_login(self, repo):
        with pytest.raises(InvalidCredentialsError) as exc:
            repo.accounts.login({}, "admin", "nope")
        assert exc.value.message == "Invalid Credentials!"

    def test_accounts_survive_reopen(self, repo, integration_project):
        from flatdocs.engine.config import load_config
        from flatdocs.repository import open_repository

        repo.accounts.register({}, "mary", "lamb")
        reopened = open_repository(load_config(str(integration_project / "flatdocs.yaml")))
        assert reopened.accounts.credentials.check_credentials("mary", "lamb") is True
