"""autorename - Rename files from their content with the help of LLMs."""

__version__ = "0.1.0"
