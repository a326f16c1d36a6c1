"""Batch orchestrator driving files from analysis to rename."""

import logging
import threading
from collections.abc import Callable, Iterable
from pathlib import Path
from uuid import UUID

from tqdm import tqdm

from autorename.config import CredentialStore, load_api_key, resolve_settings
from autorename.errors import (
    BatchInProgressError,
    ExtractionError,
    InvalidTransitionError,
    MoveError,
    NoCredentialError,
    ProviderError,
    UnknownItemError,
)
from autorename.models.file_item import FileItem, ItemEvent, StatusKind
from autorename.models.provider import ProviderSettings
from autorename.models.template import DEFAULT_TEMPLATE, EXTENSION_VARIABLE, RenameTemplate
from autorename.processors.analysis_provider import AnalysisProvider, build_provider
from autorename.processors.content_extractor import ContentExtractor
from autorename.tokens import TokenUsage


logger = logging.getLogger(__name__)

ProviderFactory = Callable[[ProviderSettings, str], AnalysisProvider]
Mover = Callable[[Path, Path], None]


def move_file(source: Path, target: Path) -> None:
    """Rename ``source`` to ``target`` without overwriting an existing file.

    A target that is the source itself (a case-only rename on a case-insensitive
    filesystem) is not treated as a collision.

    Raises:
        MoveError: If the target exists or the rename fails.
    """
    if target.exists() and not (source.exists() and target.samefile(source)):
        raise MoveError(f"A file named '{target.name}' already exists.")
    try:
        source.rename(target)
    except OSError as e:
        raise MoveError(str(e)) from e


class RenamePipeline:
    """Owns a batch of files and moves them through analysis and renaming.

    Items are processed strictly one at a time in batch order. Per-item failures are
    recorded on the item and never stop the rest of the batch; callers receive copies
    of the items and refer to them by id.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        settings: ProviderSettings | None = None,
        template: RenameTemplate | str = DEFAULT_TEMPLATE,
        extractor: ContentExtractor | None = None,
        provider_factory: ProviderFactory = build_provider,
        mover: Mover = move_file,
    ) -> None:
        """Initialize the pipeline.

        Args:
            credentials: Lookup for API keys and model names.
            settings: Provider selection and request settings.
            template: Naming template applied to every file.
            extractor: Content extractor; a default one is created when omitted.
            provider_factory: Builds the analysis provider from settings and API key.
            mover: Moves a file to its new path.
        """
        self.credentials = credentials
        self.settings = settings or ProviderSettings()
        self.template = template
        self.extractor = extractor or ContentExtractor()
        self.provider_factory = provider_factory
        self.mover = mover

        self.total_usage = TokenUsage()
        self.error_message: str | None = None

        self._items: list[FileItem] = []
        self._lock = threading.Lock()
        self._cancel_requested = False

    def __len__(self) -> int:
        return len(self._items)

    @property
    def template(self) -> RenameTemplate:
        return self._template

    @template.setter
    def template(self, value: RenameTemplate | str) -> None:
        self._template = value if isinstance(value, RenameTemplate) else RenameTemplate(template_string=value)

    @property
    def items(self) -> tuple[FileItem, ...]:
        """Snapshot of the batch in order."""
        return tuple(item.model_copy() for item in self._items)

    @property
    def is_processing(self) -> bool:
        return self._lock.locked()

    @property
    def has_ready_items(self) -> bool:
        """True when at least one selected item is ready to be renamed."""
        return any(item.is_selected and item.status.kind is StatusKind.READY for item in self._items)

    def get_item(self, item_id: UUID) -> FileItem:
        """Return a snapshot of the item with ``item_id``."""
        return self._find(item_id).model_copy()

    def _find(self, item_id: UUID) -> FileItem:
        for item in self._items:
            if item.id == item_id:
                return item
        raise UnknownItemError(f"No item with id {item_id}")

    def add_files(self, paths: Iterable[Path | str]) -> list[FileItem]:
        """Append new pending items for ``paths``.

        A batch whose items have all been renamed is cleared first. Paths already in the
        batch are skipped.

        Returns:
            Snapshots of the items that were added.
        """
        if self._items and all(item.status.kind is StatusKind.RENAMED for item in self._items):
            logger.debug("All %d item(s) renamed, starting a new batch", len(self._items))
            self.clear()

        known = {item.original_path for item in self._items}
        added: list[FileItem] = []
        for path in paths:
            item = FileItem.from_path(path)
            if item.original_path in known:
                continue
            known.add(item.original_path)
            self._items.append(item)
            added.append(item.model_copy())

        return added

    def remove_item(self, item_id: UUID) -> None:
        self._items.remove(self._find(item_id))

    def clear(self) -> None:
        """Drop every item and reset the batch error and token total."""
        self._items.clear()
        self.error_message = None
        self.total_usage = TokenUsage()

    def set_proposed_name(self, item_id: UUID, name: str) -> None:
        """Replace the proposed name of a ready item.

        Raises:
            InvalidTransitionError: If the item is not ready.
            ValueError: If ``name`` is blank.
        """
        item = self._find(item_id)
        if item.status.kind is not StatusKind.READY:
            raise InvalidTransitionError(f"Cannot edit the proposed name of an item in status '{item.status}'")
        if not name.strip():
            raise ValueError("Proposed name must not be empty")
        item.proposed_name = name

    def set_selected(self, item_id: UUID, selected: bool) -> None:
        self._find(item_id).is_selected = selected

    def reset_item(self, item_id: UUID) -> None:
        """Return a failed item to pending so the next analysis pass picks it up."""
        item = self._find(item_id)
        item.apply(ItemEvent.RESET)
        item.proposed_name = None

    def request_cancel(self) -> None:
        """Stop the running analysis pass after the current item finishes."""
        self._cancel_requested = True

    def analyze_batch(self, show_progress: bool = False) -> TokenUsage:
        """Analyze every pending item in batch order.

        Args:
            show_progress: Display a progress bar while analyzing.

        Returns:
            Token usage of the items analyzed in this pass.

        Raises:
            NoCredentialError: If no API key is configured for the selected provider.
            BatchInProgressError: If another pass is already running.
        """
        if not self._lock.acquire(blocking=False):
            raise BatchInProgressError("Another pass is already running on this batch.")
        try:
            return self._analyze_pending(show_progress)
        finally:
            self._lock.release()

    def _analyze_pending(self, show_progress: bool) -> TokenUsage:
        settings = resolve_settings(self.settings, self.credentials)
        api_key = load_api_key(self.credentials, settings.kind)
        if api_key is None:
            error = NoCredentialError(settings.kind.display_name)
            self.error_message = str(error)
            raise error

        provider = self.provider_factory(settings, api_key)
        template = self.template
        self.error_message = None
        self._cancel_requested = False

        pending = [item for item in self._items if item.status.kind is StatusKind.PENDING]
        logger.info(
            "Analyzing %d file(s) with %s (%s)", len(pending), settings.kind.display_name, settings.model_name
        )

        run_usage = TokenUsage()
        errors: list[str] = []
        for item in tqdm(pending, desc="Analyzing files...", disable=not show_progress):
            if self._cancel_requested:
                logger.info("Analysis cancelled before %s", item.original_name)
                break

            try:
                usage = self._analyze_item(item, provider, template)
            except (ExtractionError, ProviderError) as e:
                item.apply(ItemEvent.ANALYSIS_FAILED, str(e))
                errors.append(f"{item.original_name}: {e}")
                logger.warning("Analysis failed for %s: %s", item.original_name, e)
                continue
            except Exception as e:
                # Library errors outside the known types still fail only this item
                message = str(e) or type(e).__name__
                item.apply(ItemEvent.ANALYSIS_FAILED, message)
                errors.append(f"{item.original_name}: {message}")
                logger.exception("Unexpected error analyzing %s", item.original_name)
                continue

            run_usage += usage
            self.total_usage += usage

        if errors:
            self.error_message = "\n".join(errors)

        return run_usage

    def _analyze_item(self, item: FileItem, provider: AnalysisProvider, template: RenameTemplate) -> TokenUsage:
        item.apply(ItemEvent.START_ANALYSIS)
        logger.debug("Analyzing %s", item.original_name)

        content = self.extractor.extract(item.original_path)
        result = provider.analyze(content, template, item.original_name)

        values = {**result.values, EXTENSION_VARIABLE: item.extension}
        item.proposed_name = template.apply(values)
        item.token_usage = result.token_usage
        item.apply(ItemEvent.ANALYSIS_SUCCEEDED)

        logger.info("%s -> %s", item.original_name, item.proposed_name)
        return result.token_usage

    def confirm_renames(self) -> list[FileItem]:
        """Move every selected, ready item to its proposed name.

        Failures are recorded on the item and collected into ``error_message``.

        Returns:
            Snapshots of the items that were renamed.

        Raises:
            BatchInProgressError: If another pass is already running.
        """
        if not self._lock.acquire(blocking=False):
            raise BatchInProgressError("Another pass is already running on this batch.")
        try:
            return self._rename_ready()
        finally:
            self._lock.release()

    def _rename_ready(self) -> list[FileItem]:
        self.error_message = None
        renamed: list[FileItem] = []
        errors: list[str] = []

        for item in self._items:
            if not (item.is_selected and item.status.kind is StatusKind.READY and item.proposed_name):
                continue

            target = item.original_path.parent / item.proposed_name
            try:
                self.mover(item.original_path, target)
            except (MoveError, OSError) as e:
                item.apply(ItemEvent.RENAME_FAILED, str(e))
                errors.append(f"{item.original_name}: {e}")
                logger.warning("Could not rename %s: %s", item.original_name, e)
                continue

            item.apply(ItemEvent.RENAME_SUCCEEDED)
            renamed.append(item.model_copy())
            logger.info("Renamed %s to %s", item.original_name, item.proposed_name)

        if errors:
            self.error_message = "\n".join(errors)

        return renamed
