"""Textual widgets for logpeek."""
