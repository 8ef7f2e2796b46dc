"""Evidence retrieval and ranking engine for Thesis Copilot."""

__version__ = "1.0.0"
