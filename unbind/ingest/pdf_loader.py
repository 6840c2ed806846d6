from __future__ import annotations
from pathlib import Path
from typing import BinaryIO, List, Union
import io
import re
from pypdf import PdfReader
from pypdf.errors import PdfReadError
from unbind.utils.exception import CustomException, NoExtractableTextError
from unbind.utils.logger import logger

WHITESPACE_RE = re.compile(r"[ \t\r\f\v]+")

PdfSource = Union[str, Path, bytes, BinaryIO]


def clean_text(text: str) -> str:
    text = text.replace("\x00", " ")
    text = WHITESPACE_RE.sub(" ", text)
    return "\n".join(line.strip() for line in text.splitlines()).strip()


def _read_bytes(source: PdfSource) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, (str, Path)):
        return Path(source).read_bytes()
    return source.read()


def extract_pages(source: PdfSource) -> List[str]:
    data = _read_bytes(source)
    try:
        reader = PdfReader(io.BytesIO(data))
    except PdfReadError as e:
        logger.error("PDF could not be parsed: %s", e)
        raise CustomException(f"Unable to read the PDF file: {e}") from e
    pages_text: List[str] = []
    for idx, page in enumerate(reader.pages):
        try:
            txt = page.extract_text() or ""
        except Exception as e:  # pypdf raises assorted errors on malformed content streams
            logger.warning("Text extraction failed on page %s: %s", idx + 1, e)
            txt = ""
        pages_text.append(clean_text(txt))
    return pages_text


def extract_text(source: PdfSource) -> str:
    """Return the plain text of a PDF.

    Raises NoExtractableTextError when no page yields text (e.g. a scanned image).
    """
    pages_text = extract_pages(source)
    combined = "\n".join(p for p in pages_text if p)
    if not combined.strip():
        raise NoExtractableTextError()
    logger.debug("Extracted %s characters from %s page(s)", len(combined), len(pages_text))
    return combined
