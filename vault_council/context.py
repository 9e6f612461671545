"""Note context: read the active note and the notes it links to."""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

import frontmatter

logger = logging.getLogger(__name__)

_WIKILINK = re.compile(r"\[\[([^\]|#]+)(?:#[^\]|]*)?(?:\|[^\]]*)?\]\]")


@dataclass
class NoteContext:
    current_file: str | None = None
    current_content: str = ""
    linked_files: list[str] = field(default_factory=list)   # "File: name\n<content>"
    folder_path: str | None = None


def parse_note(note_path: Path) -> tuple[str, dict]:
    """Parse a markdown note with optional YAML frontmatter.

    Returns:
        (content, metadata). metadata is {} without frontmatter.
    """
    post = frontmatter.load(str(note_path))
    return post.content.strip(), dict(post.metadata)


def extract_links(content: str) -> list[str]:
    """Return unique wikilink targets in order of first appearance."""
    seen: list[str] = []
    for match in _WIKILINK.finditer(content):
        target = match.group(1).strip()
        if target and target not in seen:
            seen.append(target)
    return seen


def resolve_link(target: str, note_path: Path, vault_dir: Path) -> Path | None:
    """Resolve a wikilink target to a markdown file inside the vault.

    Tries the target as a path relative to the note's folder and to the vault
    root, then falls back to the first file in the vault with that stem.
    """
    name = target if target.endswith(".md") else f"{target}.md"
    for base in (note_path.parent, vault_dir):
        candidate = base / name
        if candidate.is_file():
            return candidate

    stem = Path(target).stem
    matches = sorted(p for p in vault_dir.rglob(f"{stem}.md") if p.is_file())
    return matches[0] if matches else None


def gather_context(note_path: Path, vault_dir: Path) -> NoteContext:
    content, _ = parse_note(note_path)

    linked: list[str] = []
    for target in extract_links(content):
        resolved = resolve_link(target, note_path, vault_dir)
        if resolved is None or resolved.resolve() == note_path.resolve():
            logger.debug("Skipping link [[%s]] in %s (unresolved or self)", target, note_path.name)
            continue
        linked_content, _ = parse_note(resolved)
        linked.append(f"File: {resolved.stem}\n{linked_content}")

    try:
        folder = note_path.parent.resolve().relative_to(vault_dir.resolve()).as_posix()
    except ValueError:
        folder = note_path.parent.as_posix()

    logger.info("Context: %s with %d linked notes", note_path.stem, len(linked))
    return NoteContext(
        current_file=note_path.stem,
        current_content=content,
        linked_files=linked,
        folder_path=folder if folder not in ("", ".") else "/",
    )


def build_query(question: str, context: NoteContext | None) -> str:
    """Prepend note context to the question. Returns the question unchanged without context."""
    if context is None or context.current_file is None:
        return question

    parts = [f"Current note: {context.current_file}\n{context.current_content}"]
    if context.linked_files:
        parts.append("Linked notes:\n\n" + "\n\n".join(context.linked_files))
    parts.append(f"Question: {question}")
    return "\n\n---\n\n".join(parts)
