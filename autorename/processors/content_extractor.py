"""Turns files into text or image payloads for analysis."""

import io
import logging
from pathlib import Path

import pillow_heif
import pymupdf
from PIL import Image

from autorename.errors import ExtractionError
from autorename.models.content import GENERIC_BINARY_MIME_TYPE, Content, ImageContent, TextContent


pillow_heif.register_heif_opener()

logger = logging.getLogger(__name__)

# Number of leading PDF pages whose text is extracted
MAX_PDF_TEXT_PAGES = 10

# Trimmed PDF text must be longer than this to be sent as text; otherwise the first page is rendered
MIN_PDF_TEXT_CHARS = 50

# Zoom factor used when rendering a PDF page to an image
PDF_RENDER_SCALE = 2.0

RASTER_MIME_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
}

TRANSCODED_MIME_TYPES = {
    "heic": "image/heic",
    "heif": "image/heif",
}

TEXT_EXTENSIONS = {"txt", "md", "csv", "json", "xml", "html", "swift", "py", "js", "ts"}


class ContentExtractor:
    """Extracts the payload sent to an analysis provider for a single file.

    Dispatch is by lowercase file extension:

    - PDF documents yield their text, or a rendering of the first page when they carry
      too little text (scanned documents).
    - Raster images are passed through unchanged.
    - HEIC/HEIF photos are transcoded to PNG.
    - Known text formats are read as UTF-8.
    - Anything else is read as UTF-8 text when possible, otherwise as opaque bytes.
    """

    def __init__(
        self,
        max_pdf_pages: int = MAX_PDF_TEXT_PAGES,
        min_pdf_text_chars: int = MIN_PDF_TEXT_CHARS,
        render_scale: float = PDF_RENDER_SCALE,
    ) -> None:
        self.max_pdf_pages = max_pdf_pages
        self.min_pdf_text_chars = min_pdf_text_chars
        self.render_scale = render_scale

    def extract(self, path: Path) -> Content:
        """Extract the content payload for ``path``.

        Args:
            path: File to read.

        Returns:
            A TextContent or ImageContent payload.

        Raises:
            ExtractionError: If the file cannot be read or a required decode fails.
        """
        path = Path(path)
        extension = path.suffix.removeprefix(".").lower()

        if extension == "pdf":
            return self._extract_pdf(path)
        if extension in RASTER_MIME_TYPES:
            return ImageContent(data=self._read_bytes(path), mime_type=RASTER_MIME_TYPES[extension])
        if extension in TRANSCODED_MIME_TYPES:
            return self._extract_transcoded(path, TRANSCODED_MIME_TYPES[extension])
        if extension in TEXT_EXTENSIONS:
            return TextContent(text=self._read_text(path))
        return self._extract_unknown(path)

    def _read_bytes(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as e:
            raise ExtractionError(f"Could not read {path.name}: {e}") from e

    def _read_text(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ExtractionError(f"{path.name} is not valid UTF-8 text.") from e
        except OSError as e:
            raise ExtractionError(f"Could not read {path.name}: {e}") from e

    def _extract_pdf(self, path: Path) -> Content:
        """Extract text from the first pages, falling back to a render of page one."""
        try:
            doc = pymupdf.open(str(path))
        except (RuntimeError, OSError, ValueError) as e:
            raise ExtractionError(f"Could not open PDF file {path.name}: {e}") from e

        with doc:
            try:
                return self._read_pdf(doc, path)
            except (RuntimeError, ValueError) as e:
                raise ExtractionError(f"Could not read PDF file {path.name}: {e}") from e

    def _read_pdf(self, doc: pymupdf.Document, path: Path) -> Content:
        pages = min(doc.page_count, self.max_pdf_pages)
        text = "".join(doc[page_idx].get_text() + "\n" for page_idx in range(pages))

        if len(text.strip()) > self.min_pdf_text_chars:
            logger.debug("Extracted %d characters of text from %s", len(text), path.name)
            return TextContent(text=text)

        if doc.page_count == 0:
            return TextContent(text=text)

        # Scanned or image-only document: let the model look at the first page
        matrix = pymupdf.Matrix(self.render_scale, self.render_scale)
        pixmap = doc[0].get_pixmap(matrix=matrix)
        logger.debug("Rendered first page of %s at %sx", path.name, self.render_scale)
        return ImageContent(data=pixmap.tobytes("png"), mime_type="image/png")

    def _extract_transcoded(self, path: Path, original_mime_type: str) -> ImageContent:
        """Re-encode a device-native photo as PNG, keeping the original bytes if decoding fails."""
        data = self._read_bytes(path)
        try:
            with Image.open(io.BytesIO(data)) as image:
                buffer = io.BytesIO()
                image.save(buffer, format="PNG")
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            logger.warning("Could not transcode %s, sending original bytes: %s", path.name, e)
            return ImageContent(data=data, mime_type=original_mime_type)

        return ImageContent(data=buffer.getvalue(), mime_type="image/png")

    def _extract_unknown(self, path: Path) -> Content:
        """Treat unknown files as text when they decode as UTF-8, otherwise as opaque bytes."""
        data = self._read_bytes(path)
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            text = ""

        if text:
            return TextContent(text=text)
        return ImageContent(data=data, mime_type=GENERIC_BINARY_MIME_TYPE)
