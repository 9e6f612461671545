"""Tests for vault_council/models.py dataclasses."""

import dataclasses

import pytest

from vault_council.errors import ConfigurationFailure
from vault_council.models import ChatTurn, CouncilConfig, DispatchOutcome, DispatchRequest, Opinion


def test_chat_turn_rejects_unknown_role():
    with pytest.raises(ValueError):
        ChatTurn(role="tool", content="x")


def test_dispatch_request_create_normalizes_models_to_tuple():
    request = DispatchRequest.create(["a", "b"], "q")
    assert request.models == ("a", "b")
    assert request.system_prompt is None


def test_dispatch_request_is_immutable():
    request = DispatchRequest.create(["a"], "q")
    with pytest.raises(dataclasses.FrozenInstanceError):
        request.user_message = "changed"  # type: ignore[misc]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"models": []},
        {"models": ["a", "a"]},
        {"models": ["a"], "temperature": 1.5},
        {"models": ["a"], "temperature": -0.1},
        {"models": ["a"], "max_tokens": 0},
    ],
)
def test_dispatch_request_rejects_invalid_input(kwargs):
    with pytest.raises(ConfigurationFailure):
        DispatchRequest.create(user_message="q", **kwargs)


def test_outcome_success_and_failure():
    ok = DispatchOutcome.success("42")
    bad = DispatchOutcome.failure("timeout")
    assert ok.ok and ok.text == "42" and ok.error is None
    assert not bad.ok and bad.error == "timeout" and bad.text is None


def test_outcome_success_requires_text():
    with pytest.raises(ValueError):
        DispatchOutcome.success("")


@pytest.mark.parametrize("kwargs", [{}, {"text": "42", "error": "timeout"}])
def test_outcome_requires_exactly_one_of_text_or_error(kwargs):
    with pytest.raises(ValueError, match="exactly one"):
        DispatchOutcome(**kwargs)


def test_council_config_review_panel_defaults_to_models():
    config = CouncilConfig(models=("a", "b"))
    assert config.review_panel == ("a", "b")
    assert CouncilConfig(models=("a",), reviewers=("c",)).review_panel == ("c",)


def test_opinion_fields():
    op = Opinion(model="x-ai/grok-4", content="Error: timeout")
    assert op.model == "x-ai/grok-4"
    assert op.content.startswith("Error: ")
