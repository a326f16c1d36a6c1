"""Analysis provider selection and settings."""

from enum import Enum

from pydantic import BaseModel, Field


ANTHROPIC_API_VERSION = "2023-06-01"


class ProviderKind(str, Enum):
    """Supported LLM providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"

    @property
    def display_name(self) -> str:
        return {ProviderKind.OPENAI: "OpenAI", ProviderKind.ANTHROPIC: "Anthropic"}[self]

    @property
    def base_url(self) -> str:
        return {
            ProviderKind.OPENAI: "https://api.openai.com/v1",
            ProviderKind.ANTHROPIC: "https://api.anthropic.com",
        }[self]

    @property
    def default_model(self) -> str:
        return {
            ProviderKind.OPENAI: "gpt-4o",
            ProviderKind.ANTHROPIC: "claude-sonnet-4-20250514",
        }[self]

    @property
    def credential_key(self) -> str:
        """Credential store key holding the API key."""
        return f"{self.value}_api_key"

    @property
    def model_key(self) -> str:
        """Credential store key holding an optional model override."""
        return f"{self.value}_model"


class ProviderSettings(BaseModel):
    """Request settings for an analysis provider."""

    kind: ProviderKind = Field(default=ProviderKind.OPENAI, description="Provider to call")
    model: str | None = Field(default=None, description="Model identifier; provider default when unset")
    base_url: str | None = Field(default=None, description="API base URL; provider default when unset")
    openai_temperature: float = Field(default=0.1, ge=0.0, le=2.0, description="Sampling temperature for OpenAI")
    max_tokens: int = Field(default=1024, gt=0, description="Maximum output tokens (Anthropic)")
    anthropic_version: str = Field(default=ANTHROPIC_API_VERSION, description="anthropic-version header value")

    @property
    def model_name(self) -> str:
        return self.model or self.kind.default_model

    @property
    def api_base_url(self) -> str:
        return self.base_url or self.kind.base_url
