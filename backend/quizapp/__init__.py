# backend/quizapp/__init__.py
"""Timed multiple-choice quiz service."""

__version__ = "0.1.0"
