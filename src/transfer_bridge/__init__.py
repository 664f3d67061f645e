"""Bridge between Globus transfer completion and the file-load pipeline."""

__version__ = "0.1.0"
