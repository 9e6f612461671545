"""System prompts and serialized opinion/review blocks for each stage."""

from collections.abc import Sequence

from vault_council.errors import ConfigurationFailure
from vault_council.models import Opinion, Review

_STYLE_INSTRUCTIONS = {
    "concise": "Provide a concise and accurate answer to the user's query.",
    "balanced": "Provide an accurate, well-structured answer to the user's query with moderate detail.",
    "detailed": "Provide a thorough, accurate and detailed answer to the user's query.",
}

OPINION_SEPARATOR = "\n\n---\n\n"


def _language_instruction(language: str) -> str:
    return f"IMPORTANT: You MUST answer in {language}."


def opinion_system_prompt(language: str, response_style: str = "concise") -> str:
    style = _STYLE_INSTRUCTIONS.get(response_style)
    if style is None:
        raise ConfigurationFailure(
            f"Unknown response style {response_style!r}; expected one of {', '.join(_STYLE_INSTRUCTIONS)}"
        )
    return f"You are a member of the LLM Council. {style} {_language_instruction(language)}"


def review_system_prompt(language: str) -> str:
    return (
        "You are a member of the LLM Council. Review the following opinions from other models "
        "on the user's query. Critique them for accuracy, bias, and insight. Be constructive. "
        f"{_language_instruction(language)}"
    )


def synthesis_system_prompt(language: str) -> str:
    return (
        "You are the Chairman of the LLM Council. Synthesize the final answer based on the "
        "council members' opinions and their peer reviews. Highlight consensus and disagreements. "
        f"{_language_instruction(language)}"
    )


def format_opinions_for_review(opinions: Sequence[Opinion]) -> str:
    """One ``[model]: content`` entry per opinion, in stage-1 order."""
    return OPINION_SEPARATOR.join(f"[{op.model}]: {op.content}" for op in opinions)


def review_user_message(query: str, opinions: Sequence[Opinion]) -> str:
    return f"Query: {query}\n\nOpinions to Review:\n{format_opinions_for_review(opinions)}"


def synthesis_user_message(
    query: str,
    opinions: Sequence[Opinion],
    reviews: Sequence[Review],
) -> str:
    opinions_text = "\n\n".join(f"[Model: {op.model}]: {op.content}" for op in opinions)
    reviews_text = "\n\n".join(f"[Reviewer: {rw.reviewer}]: {rw.content}" for rw in reviews)
    return (
        f"Query: {query}\n\n"
        f"Council Opinions:\n{opinions_text}\n\n"
        f"Peer Reviews:\n{reviews_text}"
    )
