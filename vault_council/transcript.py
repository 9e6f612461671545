"""Session transcript: accumulate council output, print it, save it as a note."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import frontmatter
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from vault_council.models import CouncilRun, Opinion, Review, SynthesisResult

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

_HEADINGS = {
    "opinion": "🤖 Response",
    "review": "🔎 Review",
    "synthesis": "🏛️ Synthesis",
}


@dataclass
class SessionMessage:
    role: str              # "user" or "assistant"
    kind: str              # "question", "opinion", "review", "synthesis"
    content: str
    model: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class CouncilSession:
    messages: list[SessionMessage] = field(default_factory=list)

    def add_question(self, question: str) -> None:
        self.messages.append(SessionMessage(role="user", kind="question", content=question))

    def add_opinions(self, opinions: Sequence[Opinion]) -> None:
        for op in opinions:
            self.messages.append(SessionMessage("assistant", "opinion", op.content, op.model))

    def add_reviews(self, reviews: Sequence[Review]) -> None:
        for rw in reviews:
            self.messages.append(SessionMessage("assistant", "review", rw.content, rw.reviewer))

    def add_synthesis(self, synthesis: SynthesisResult) -> None:
        self.messages.append(SessionMessage("assistant", "synthesis", synthesis.content, synthesis.model))

    def add_run(self, run: CouncilRun, question: str | None = None) -> None:
        self.add_question(question if question is not None else run.query)
        self.add_opinions(run.opinions)
        self.add_reviews(run.reviews)
        if run.synthesis is not None:
            self.add_synthesis(run.synthesis)

    @classmethod
    def from_run(cls, run: CouncilRun, question: str | None = None) -> "CouncilSession":
        session = cls()
        session.add_run(run, question)
        return session

    def clear(self) -> None:
        self.messages.clear()


def _timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d_%H-%M-%S")


def _date_string() -> str:
    return datetime.now().strftime("%Y-%m-%d")


def render_markdown(session: CouncilSession, source_note: Path | None = None) -> str:
    """Render the session as a markdown note with YAML frontmatter."""
    lines: list[str] = ["# AI Council Conversation", ""]
    if source_note is not None:
        lines.append(f"**Source Note:** [[{source_note.stem}]]")
    lines += [f"**Date:** {_date_string()}", "", "---", ""]

    for msg in session.messages:
        if msg.role == "user":
            lines += ["## 🙋 Question", "", msg.content, ""]
        else:
            heading = _HEADINGS.get(msg.kind, "🤖 Response")
            label = f" ({msg.model})" if msg.model else ""
            lines += [f"## {heading}{label}", "", msg.content, ""]

    metadata: dict = {
        "created": datetime.now().isoformat(timespec="seconds"),
        "tags": ["ai-council", "conversation"],
    }
    if source_note is not None:
        metadata["source"] = f"[[{source_note.stem}]]"

    post = frontmatter.Post("\n".join(lines), **metadata)
    return frontmatter.dumps(post) + "\n"


def _add_link_to_source(source_note: Path, saved: Path) -> None:
    """Append a link to the saved transcript under an "AI Analysis" section.

    Failures are logged and swallowed; the transcript is already saved.
    """
    try:
        content = source_note.read_text(encoding="utf-8")
        link = f"[[{saved.stem}]]"
        if link in content:
            return

        if "## AI Analysis" not in content:
            content += "\n\n---\n\n## AI Analysis\n\n"
        else:
            content += "\n"
        content += f"- {link} - AI Council conversation ({_date_string()})\n"
        source_note.write_text(content, encoding="utf-8")
    except OSError as exc:
        logger.error("Error adding link to source note %s: %s", source_note, exc)


def save_session(
    session: CouncilSession,
    *,
    save_location: str = "context-based",
    custom_folder: Path = Path("AI Council"),
    source_note: Path | None = None,
    vault_dir: Path = Path("."),
) -> Path:
    """Save the session transcript as a markdown note.

    Args:
        session: The accumulated session.
        save_location: "context-based" saves next to ``source_note`` and
            links back to it; "custom" (or no source note) saves into
            ``custom_folder``.
        custom_folder: Target folder, relative to ``vault_dir`` unless absolute.
        source_note: The note used as context, if any.
        vault_dir: Vault root.

    Returns:
        Path to the saved file.
    """
    timestamp = _timestamp()
    context_based = save_location == "context-based" and source_note is not None

    if context_based:
        folder = source_note.parent
        filename = f"{source_note.stem}_ai-council_{timestamp}.md"
    else:
        folder = custom_folder if custom_folder.is_absolute() else vault_dir / custom_folder
        folder.mkdir(parents=True, exist_ok=True)
        filename = f"ai-council_{timestamp}.md"

    filepath = folder / filename
    filepath.write_text(render_markdown(session, source_note), encoding="utf-8")
    logger.info("Conversation saved to: %s", filepath)

    if context_based:
        _add_link_to_source(source_note, filepath)
    return filepath


def _preview(content: str, words: int = 50) -> str:
    all_words = content.split()
    preview = " ".join(all_words[:words])
    if len(all_words) > words:
        preview += "..."
    return preview


def print_opinions(opinions: Sequence[Opinion]) -> None:
    console.print(Rule("[bold cyan]Council Opinions[/bold cyan]"))
    for op in opinions:
        error = op.content.startswith("Error: ")
        console.print(
            Panel(
                _preview(op.content),
                title=f"[bold]{op.model}[/bold]",
                border_style="red" if error else "dim",
            )
        )


def print_reviews(reviews: Sequence[Review]) -> None:
    console.print(Rule("[bold cyan]Peer Reviews[/bold cyan]"))
    for rw in reviews:
        error = rw.content.startswith("Error: ")
        console.print(
            Panel(
                _preview(rw.content),
                title=f"[bold]{rw.reviewer}[/bold]",
                border_style="red" if error else "dim",
            )
        )


def print_synthesis(synthesis: SynthesisResult, duration_sec: float | None = None) -> None:
    console.print(Rule("[bold green]Chairman Synthesis[/bold green]"))
    meta = f"Synthesized by: {synthesis.model}"
    if duration_sec is not None:
        meta += f" | Duration: {duration_sec:.1f}s"
    console.print(Text(meta, style="dim"))
    console.print(Markdown(synthesis.content))
