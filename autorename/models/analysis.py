"""Analysis result data model."""

from pydantic import BaseModel, Field

from autorename.tokens import TokenUsage


class AnalysisResult(BaseModel):
    """Values extracted by a provider for one file."""

    values: dict[str, str] = Field(description="Template variable name to extracted value")
    token_usage: TokenUsage = Field(default_factory=TokenUsage, description="Tokens consumed by the call")
