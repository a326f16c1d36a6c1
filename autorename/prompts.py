# ruff: noqa: E501
"""Prompts used in conjunction with LLMs for various tasks."""

# Instruction sent with every file analysis. Filled in by `build_analysis_prompt`.
ANALYSIS_PROMPT = """Analyze this file and extract values for a file naming template. The original file name is "{file_name}".

Extract values for these template variables: {variable_list}

Rules:
- Use only filesystem-safe characters (no / \\ : * ? " < > |)
- Use hyphens or underscores instead of spaces
- Keep values concise (1-4 words each)
- For dates, use YYYY-MM-DD format
- If a value cannot be determined, use "unknown"

Respond ONLY with a JSON object mapping variable names to extracted values. Example: {{"date": "2024-01-15", "topic": "quarterly-report", "author": "john-smith"}}"""

# Separates the instruction from inline text content.
FILE_CONTENT_HEADER = "\n\nFile content:\n"


def build_analysis_prompt(variable_names: list[str], file_name: str) -> str:
    """Fill the analysis prompt for the given template variables and original filename."""
    return ANALYSIS_PROMPT.format(file_name=file_name, variable_list=", ".join(variable_names))
