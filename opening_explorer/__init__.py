"""Data model and compact binary encodings for a chess opening explorer."""

__version__ = "0.1.0"