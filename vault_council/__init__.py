"""Vault Council: multi-model deliberation with peer review and chairman synthesis."""

__version__ = "0.1.0"
