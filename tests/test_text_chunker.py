"""Tests for the paragraph chunker."""

import pytest

from shared.errors import InputDocumentError
from shared.helper.text_chunker import chunk_file_by_paragraphs, chunk_text_by_paragraphs, read_text_file


class TestChunkTextByParagraphs:
    def test_splits_on_blank_lines(self):
        text = "First line\nsecond line\n\nSecond paragraph\n\n\n\nThird"
        chunks = chunk_text_by_paragraphs(text)

        assert [c.text for c in chunks] == ["First line second line", "Second paragraph", "Third"]
        assert [c.chunk_index for c in chunks] == [0, 1, 2]

    def test_strips_lines_and_whitespace_only_lines_separate(self):
        text = "   indented   \n  more  \n   \t  \nnext"
        chunks = chunk_text_by_paragraphs(text)

        assert [c.text for c in chunks] == ["indented more", "next"]

    def test_new_chunks_are_unpopulated(self):
        chunk = chunk_text_by_paragraphs("only one")[0]

        assert chunk.id is None
        assert chunk.embedding == []
        assert chunk.summary == ""

    def test_empty_text(self):
        assert chunk_text_by_paragraphs("") == []
        assert chunk_text_by_paragraphs("\n\n   \n") == []

    def test_reads_file(self, tmp_path):
        path = tmp_path / "notes.md"
        path.write_text("# Title\n\nBody text\ncontinues\n", encoding="utf-8")

        chunks = chunk_file_by_paragraphs(path)

        assert [c.text for c in chunks] == ["# Title", "Body text continues"]

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "binary.txt"
        path.write_bytes(b"\xff\xfe\x00broken")

        with pytest.raises(InputDocumentError, match="not valid UTF-8"):
            read_text_file(path)

    def test_unreadable_path(self, tmp_path):
        with pytest.raises(InputDocumentError, match="failed to read"):
            read_text_file(tmp_path)
