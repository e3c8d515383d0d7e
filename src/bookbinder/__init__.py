"""Assemble numbered Markdown chapters into a single book."""

__version__ = "0.1.0"
