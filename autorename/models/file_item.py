"""File item data model and its status state machine."""

from enum import Enum
from pathlib import Path
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from autorename.errors import InvalidTransitionError
from autorename.tokens import TokenUsage


class StatusKind(str, Enum):
    """Lifecycle stage of a file item."""

    PENDING = "pending"
    PROCESSING = "processing"
    READY = "ready"
    RENAMED = "renamed"
    ERROR = "error"


class ItemEvent(str, Enum):
    """Events that drive a file item through its lifecycle."""

    START_ANALYSIS = "start_analysis"
    ANALYSIS_SUCCEEDED = "analysis_succeeded"
    ANALYSIS_FAILED = "analysis_failed"
    RENAME_SUCCEEDED = "rename_succeeded"
    RENAME_FAILED = "rename_failed"
    RESET = "reset"


class ItemStatus(BaseModel):
    """Current status of a file item. ``message`` is only set for errors."""

    model_config = ConfigDict(frozen=True)

    kind: StatusKind = Field(description="Lifecycle stage")
    message: str | None = Field(default=None, description="Human-readable error description")

    def __str__(self) -> str:
        if self.kind is StatusKind.ERROR:
            return f"error({self.message})"
        return self.kind.value

    @classmethod
    def pending(cls) -> "ItemStatus":
        return cls(kind=StatusKind.PENDING)

    @classmethod
    def error(cls, message: str) -> "ItemStatus":
        return cls(kind=StatusKind.ERROR, message=message)

    @property
    def is_error(self) -> bool:
        return self.kind is StatusKind.ERROR


# (current kind, event) -> next kind
_TRANSITIONS: dict[tuple[StatusKind, ItemEvent], StatusKind] = {
    (StatusKind.PENDING, ItemEvent.START_ANALYSIS): StatusKind.PROCESSING,
    (StatusKind.PROCESSING, ItemEvent.ANALYSIS_SUCCEEDED): StatusKind.READY,
    (StatusKind.PROCESSING, ItemEvent.ANALYSIS_FAILED): StatusKind.ERROR,
    (StatusKind.READY, ItemEvent.RENAME_SUCCEEDED): StatusKind.RENAMED,
    (StatusKind.READY, ItemEvent.RENAME_FAILED): StatusKind.ERROR,
    (StatusKind.ERROR, ItemEvent.RESET): StatusKind.PENDING,
}


def transition(status: ItemStatus, event: ItemEvent, message: str | None = None) -> ItemStatus:
    """Compute the status that follows ``event``.

    Args:
        status: Current item status.
        event: Event being applied.
        message: Error description, required for failure events.

    Returns:
        The next status.

    Raises:
        InvalidTransitionError: If the event is not allowed in the current status.
    """
    next_kind = _TRANSITIONS.get((status.kind, event))
    if next_kind is None:
        raise InvalidTransitionError(f"Cannot apply '{event.value}' to an item in status '{status}'")

    if next_kind is StatusKind.ERROR:
        return ItemStatus.error(message or "Unknown error")
    return ItemStatus(kind=next_kind)


class FileItem(BaseModel):
    """One file in a rename batch."""

    id: UUID = Field(default_factory=uuid4, frozen=True, description="Stable unique identifier")
    original_path: Path = Field(frozen=True, description="Absolute path of the file when it was added")
    original_name: str = Field(description="Display name derived from the original path")
    proposed_name: str | None = Field(default=None, description="New filename proposed by analysis")
    status: ItemStatus = Field(default_factory=ItemStatus.pending, description="Lifecycle status")
    is_selected: bool = Field(default=True, description="Whether the item takes part in the rename pass")
    token_usage: TokenUsage | None = Field(default=None, description="Tokens used by the last successful analysis")

    def __str__(self) -> str:
        return f"FileItem('{self.original_name}', status={self.status}, proposed_name={self.proposed_name!r})"

    @classmethod
    def from_path(cls, path: Path | str) -> "FileItem":
        """Create a pending item for ``path``."""
        absolute = Path(path).absolute()
        return cls(original_path=absolute, original_name=absolute.name)

    @property
    def extension(self) -> str:
        """Original file extension without the leading dot."""
        return self.original_path.suffix.removeprefix(".")

    def apply(self, event: ItemEvent, message: str | None = None) -> None:
        """Advance this item's status by ``event``."""
        self.status = transition(self.status, event, message)
