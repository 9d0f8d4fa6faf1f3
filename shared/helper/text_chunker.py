"""Paragraph chunker: splits text on blank lines into ordered TextChunks."""

from pathlib import Path

from shared.errors import InputDocumentError
from shared.models.chunk import TextChunk


def chunk_text_by_paragraphs(text: str) -> list[TextChunk]:
    """Split text into paragraph chunks.

    Lines are stripped; consecutive non-blank lines are joined with a single
    space; one or more blank lines end a paragraph.

    Args:
        text (str): The full source text.

    Returns:
        list[TextChunk]: Chunks with chunk_index 0..N-1 and no id/embedding/summary.
    """
    chunks: list[TextChunk] = []
    current: list[str] = []

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if line:
            current.append(line)
            continue
        if current:
            chunks.append(TextChunk(text=" ".join(current), chunk_index=len(chunks)))
            current = []

    if current:
        chunks.append(TextChunk(text=" ".join(current), chunk_index=len(chunks)))
    return chunks


def read_text_file(path: str | Path) -> str:
    """Read a UTF-8 text or markdown file.

    Raises:
        InputDocumentError: If the file cannot be read or is not valid UTF-8.
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise InputDocumentError(f"input file {path} is not valid UTF-8 text: {exc}") from exc
    except OSError as exc:
        raise InputDocumentError(f"failed to read input file {path}: {exc}") from exc


def chunk_file_by_paragraphs(path: str | Path) -> list[TextChunk]:
    """Read a UTF-8 text or markdown file and split it into paragraph chunks."""
    return chunk_text_by_paragraphs(read_text_file(path))
