"""Quota-gated multi-provider routing for AI interview sessions."""

__version__ = "0.1.0"
