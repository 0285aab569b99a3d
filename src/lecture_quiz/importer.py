"""Lecture PDF selection for simulated question generation."""
from pathlib import Path

from PyPDF2 import PdfReader
from PyPDF2.errors import PyPdfError


def read_pdf(file_path: str) -> dict:
    """Check that ``file_path`` is a readable PDF. Returns its name, page count and text size.

    Raises ValueError for anything that is not a usable PDF.
    """
    path = Path(file_path)
    if not path.is_file():
        raise ValueError(f"File not found: {file_path}")
    if path.suffix.lower() != ".pdf":
        raise ValueError(f"Not a PDF file: {path.name}")
    try:
        reader = PdfReader(str(path))
        text = "\n".join(page.extract_text() or "" for page in reader.pages)
    except (PyPdfError, OSError) as e:
        raise ValueError(f"Could not read {path.name}: {e}") from e
    return {"filename": path.name, "pages": len(reader.pages), "length": len(text)}
