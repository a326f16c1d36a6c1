"""Token usage accounting."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TokenUsage:
    """Provider-reported token counts for one or more LLM calls."""

    input_tokens: int = 0
    output_tokens: int = 0

    def __post_init__(self) -> None:
        if self.input_tokens < 0 or self.output_tokens < 0:
            raise ValueError(
                f"Token counts must be non-negative, got input={self.input_tokens}, output={self.output_tokens}"
            )

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        if not isinstance(other, TokenUsage):
            return NotImplemented
        return TokenUsage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
        )

    @property
    def total_tokens(self) -> int:
        """Total tokens used across all calls."""
        return self.input_tokens + self.output_tokens

    def summary(self) -> str:
        """Return a human-readable summary of token usage."""
        lines = [
            "Token Usage Summary:",
            f"  Input tokens: {self.input_tokens:,}",
            f"  Output tokens: {self.output_tokens:,}",
            f"  Total tokens: {self.total_tokens:,}",
        ]
        return "\n".join(lines)
