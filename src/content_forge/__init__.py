"""ContentForgeAI: upload page and webhook proxy for PDF content briefs."""

__version__ = "0.1.0"
