"""Tests for vault_council/context.py."""

from pathlib import Path

import pytest

from vault_council.context import NoteContext, build_query, extract_links, gather_context, resolve_link


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    (tmp_path / "projects").mkdir()
    (tmp_path / "people").mkdir()
    (tmp_path / "projects" / "design.md").write_text(
        "---\ntags: [design]\n---\nWe compare [[storage]] options with [[Alice|our lead]].\n"
        "See also [[storage#Tradeoffs]] and [[missing note]].\n",
        encoding="utf-8",
    )
    (tmp_path / "projects" / "storage.md").write_text("SQLite vs Postgres.", encoding="utf-8")
    (tmp_path / "people" / "Alice.md").write_text("---\nrole: lead\n---\nAlice prefers Postgres.", encoding="utf-8")
    return tmp_path


def test_extract_links_handles_alias_heading_and_duplicates():
    content = "[[a]] then [[b|alias]] then [[a#heading]] and [[c/d]]"
    assert extract_links(content) == ["a", "b", "c/d"]


def test_resolve_link_prefers_relative_then_stem(vault: Path):
    note = vault / "projects" / "design.md"
    assert resolve_link("storage", note, vault) == vault / "projects" / "storage.md"
    assert resolve_link("Alice", note, vault) == vault / "people" / "Alice.md"
    assert resolve_link("missing note", note, vault) is None


def test_gather_context_reads_note_and_links(vault: Path):
    context = gather_context(vault / "projects" / "design.md", vault)

    assert context.current_file == "design"
    assert "tags:" not in context.current_content
    assert "[[storage]]" in context.current_content
    assert context.folder_path == "projects"
    assert len(context.linked_files) == 2
    assert context.linked_files[0] == "File: storage\nSQLite vs Postgres."
    assert context.linked_files[1] == "File: Alice\nAlice prefers Postgres."


def test_gather_context_root_folder(vault: Path):
    note = vault / "root.md"
    note.write_text("No links here.", encoding="utf-8")

    context = gather_context(note, vault)

    assert context.folder_path == "/"
    assert context.linked_files == []


def test_build_query_without_context_is_unchanged():
    assert build_query("What is 6 x 7?", None) == "What is 6 x 7?"
    assert build_query("q", NoteContext()) == "q"


def test_build_query_prepends_note_and_links():
    context = NoteContext(
        current_file="design",
        current_content="Design notes.",
        linked_files=["File: storage\nSQLite."],
    )

    query = build_query("Which database?", context)

    assert query.startswith("Current note: design\nDesign notes.")
    assert "Linked notes:\n\nFile: storage\nSQLite." in query
    assert query.endswith("Question: Which database?")
