"""Tests for vault_council/transcript.py."""

from pathlib import Path

import frontmatter
import pytest

from vault_council.models import CouncilRun, Opinion, SynthesisResult
from vault_council.transcript import CouncilSession, _add_link_to_source, render_markdown, save_session


@pytest.fixture
def sample_run(sample_opinions, sample_reviews) -> CouncilRun:
    return CouncilRun(
        query="YAML or JSON?",
        opinions=tuple(sample_opinions) + (Opinion("x-ai/grok-4.1-fast", "Error: timeout"),),
        reviews=tuple(sample_reviews),
        synthesis=SynthesisResult(model="anthropic/claude-4.5-sonnet-20250929", content="## Consensus\nYAML."),
        duration_sec=3.2,
    )


def test_session_from_run_keeps_stage_order(sample_run):
    session = CouncilSession.from_run(sample_run)

    kinds = [m.kind for m in session.messages]
    assert kinds == ["question", "opinion", "opinion", "opinion", "review", "review", "synthesis"]
    assert session.messages[0].content == "YAML or JSON?"
    assert session.messages[3].content == "Error: timeout"
    assert session.messages[-1].model == "anthropic/claude-4.5-sonnet-20250929"


def test_session_without_synthesis(sample_opinions):
    run = CouncilRun(query="q", opinions=tuple(sample_opinions), reviews=(), synthesis=None, duration_sec=1.0)
    session = CouncilSession.from_run(run, question="original question")

    assert session.messages[0].content == "original question"
    assert all(m.kind != "synthesis" for m in session.messages)


def test_render_markdown_sections(sample_run):
    text = render_markdown(CouncilSession.from_run(sample_run))

    assert "# AI Council Conversation" in text
    assert "## 🙋 Question" in text
    assert "## 🤖 Response (openai/gpt-5.2)" in text
    assert "## 🔎 Review (x-ai/grok-4.1-fast)" in text
    assert "## 🏛️ Synthesis (anthropic/claude-4.5-sonnet-20250929)" in text
    assert text.index("## 🙋 Question") < text.index("## 🤖 Response") < text.index("## 🔎 Review")
    assert "**Source Note:**" not in text


def test_render_markdown_frontmatter(sample_run):
    post = frontmatter.loads(render_markdown(CouncilSession.from_run(sample_run), Path("notes/design.md")))

    assert post.metadata["tags"] == ["ai-council", "conversation"]
    assert post.metadata["source"] == "[[design]]"
    assert "created" in post.metadata
    assert "**Source Note:** [[design]]" in post.content


def test_save_custom_location_creates_folder(tmp_path: Path, sample_run):
    saved = save_session(
        CouncilSession.from_run(sample_run),
        save_location="custom",
        custom_folder=Path("AI Council"),
        vault_dir=tmp_path,
    )

    assert saved.exists()
    assert saved.parent == tmp_path / "AI Council"
    assert saved.name.startswith("ai-council_")
    assert saved.suffix == ".md"


def test_save_context_based_without_note_falls_back_to_custom(tmp_path: Path, sample_run):
    saved = save_session(
        CouncilSession.from_run(sample_run),
        save_location="context-based",
        vault_dir=tmp_path,
    )
    assert saved.parent == tmp_path / "AI Council"


def test_save_context_based_next_to_note_and_links_back(tmp_path: Path, sample_run):
    note = tmp_path / "design.md"
    note.write_text("# Design\n", encoding="utf-8")

    saved = save_session(
        CouncilSession.from_run(sample_run),
        save_location="context-based",
        source_note=note,
        vault_dir=tmp_path,
    )

    assert saved.parent == tmp_path
    assert saved.name.startswith("design_ai-council_")
    note_text = note.read_text(encoding="utf-8")
    assert "## AI Analysis" in note_text
    assert f"- [[{saved.stem}]] - AI Council conversation" in note_text


def test_back_link_added_once_and_section_reused(tmp_path: Path, sample_run):
    note = tmp_path / "design.md"
    note.write_text("# Design\n", encoding="utf-8")
    session = CouncilSession.from_run(sample_run)

    first = save_session(session, source_note=note, vault_dir=tmp_path)
    (tmp_path / "second.md").write_text("", encoding="utf-8")
    note_before = note.read_text(encoding="utf-8")
    # Re-linking the same transcript is a no-op.
    _add_link_to_source(note, first)

    assert note.read_text(encoding="utf-8") == note_before
    _add_link_to_source(note, tmp_path / "second.md")
    text = note.read_text(encoding="utf-8")
    assert text.count("## AI Analysis") == 1
    assert "[[second]]" in text
