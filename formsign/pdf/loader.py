"""Background page sources and loading helpers."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Mapping, Protocol

import fitz
from PIL import Image, UnidentifiedImageError

from formsign.model.document import BackgroundDocument
from formsign.utils.logger import setup_logger

logger = setup_logger(__name__)


class SourceDocumentError(RuntimeError):
    """Raised when a page background is missing or cannot be opened."""


class BackgroundSource(Protocol):
    def read(self, handle: str) -> bytes:
        ...


class FileBackgroundSource:
    """Resolve background handles as paths, optionally relative to ``base_dir``."""

    def __init__(self, base_dir: str | Path | None = None) -> None:
        self._base_dir = Path(base_dir) if base_dir is not None else None

    def read(self, handle: str) -> bytes:
        path = Path(handle)
        if self._base_dir is not None and not path.is_absolute():
            path = self._base_dir / path
        if not path.exists():
            raise SourceDocumentError(f"File not found: {path}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise SourceDocumentError(f"Failed to read background: {path}") from exc


class MappingBackgroundSource:
    """Serve background bytes already held in memory, keyed by handle."""

    def __init__(self, documents: Mapping[str, bytes]) -> None:
        self._documents = dict(documents)

    def read(self, handle: str) -> bytes:
        try:
            return self._documents[handle]
        except KeyError:
            raise SourceDocumentError(f"Unknown background handle: {handle}") from None


def load_background(handle: str, source: BackgroundSource) -> BackgroundDocument:
    data = source.read(handle)
    if not data:
        raise SourceDocumentError(f"Background is empty: {handle}")

    if data.lstrip()[:5] == b"%PDF-":
        try:
            document = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:
            raise SourceDocumentError(f"Failed to open PDF: {handle}") from exc
        if document.page_count == 0:
            document.close()
            raise SourceDocumentError(f"PDF has no pages: {handle}")
        logger.debug("Loaded background PDF %s (%d pages)", handle, document.page_count)
        return BackgroundDocument(handle_ref=handle, data=data, handle=document)

    try:
        with Image.open(BytesIO(data)) as image:
            image.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise SourceDocumentError(f"Background is neither a PDF nor an image: {handle}") from exc
    logger.debug("Loaded raster background %s", handle)
    return BackgroundDocument(handle_ref=handle, data=data)
