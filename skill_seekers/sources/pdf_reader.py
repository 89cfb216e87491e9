"""PDF text decoding with PyMuPDF."""

from dataclasses import dataclass, field

import fitz  # PyMuPDF
import structlog

from skill_seekers.common.constants import PDF_METADATA_KEYS
from skill_seekers.utils.exceptions import ExtractionError

logger = structlog.get_logger(__name__)


@dataclass
class PdfContent:
    """Decoded PDF text, page count and document information."""

    text: str
    pages: int
    metadata: dict[str, str] = field(default_factory=dict)


class PdfReader:
    """Decodes PDF bytes to plain text, page by page."""

    def read(self, data: bytes) -> PdfContent:
        """Decode a PDF buffer.

        Args:
            data: Raw PDF bytes

        Returns:
            Text of all pages joined by newlines, page count and the
            Title/Author/Subject/Creator entries that are set

        Raises:
            ExtractionError: If the buffer is not a readable PDF
        """
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except (RuntimeError, ValueError) as e:
            raise ExtractionError(f"Failed to open PDF: {e}") from e

        try:
            page_texts = [page.get_text("text") for page in doc]
            raw_metadata = doc.metadata or {}
        except RuntimeError as e:
            raise ExtractionError(f"Failed to read PDF text: {e}") from e
        finally:
            doc.close()

        metadata = {}
        for key in PDF_METADATA_KEYS:
            value = raw_metadata.get(key.lower())
            if value:
                metadata[key] = value

        logger.debug("pdf_decoded", pages=len(page_texts), metadata_keys=list(metadata))
        return PdfContent(text="\n".join(page_texts), pages=len(page_texts), metadata=metadata)
