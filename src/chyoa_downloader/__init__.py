"""Download CHYOA chapters and their ancestor chains as Markdown or JSON."""

__version__ = "1.0.0"
