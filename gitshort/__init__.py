"""gitshort: a URL shortener whose records are git commits."""

__version__ = "0.1.0"
