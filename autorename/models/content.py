"""Content payload models sent to analysis providers."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


GENERIC_BINARY_MIME_TYPE = "application/octet-stream"


class TextContent(BaseModel):
    """Text extracted from a file."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str = Field(description="Extracted text")

    def __str__(self) -> str:
        return f"TextContent({len(self.text)} chars)"


class ImageContent(BaseModel):
    """Raster image (or opaque binary) payload."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["image"] = "image"
    data: bytes = Field(description="Raw image bytes")
    mime_type: str = Field(description="MIME type of the image bytes")

    def __str__(self) -> str:
        return f"ImageContent({len(self.data)} bytes, {self.mime_type})"

    @property
    def is_generic(self) -> bool:
        """True when the extractor could not identify the image type."""
        return self.mime_type == GENERIC_BINARY_MIME_TYPE


Content = TextContent | ImageContent
