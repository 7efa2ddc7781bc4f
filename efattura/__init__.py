"""efattura - Italian electronic invoice normalization and PDF rendering."""

__version__ = "1.0.0"
