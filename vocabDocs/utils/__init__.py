"""Shared utilities for vocabDocs."""
