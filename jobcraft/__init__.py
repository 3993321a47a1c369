"""Resume scoring, skill matching and AI-assisted resume writing."""

__version__ = "0.1.0"
