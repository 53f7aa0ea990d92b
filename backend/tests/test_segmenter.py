"""
Unit tests for the content segmenter.
"""
import pytest

from models.content_models import (
    BlockType,
    CodeBlock,
    HeadingBlock,
    ImageBlock,
    ListBlock,
    ListItem,
    MathBlock,
    ParagraphBlock,
    TextBlock,
)
from services.processing.segmenter import ContentSegmenter, chunk_blocks


def words(n, prefix="w"):
    return " ".join(f"{prefix}{i}" for i in range(n))


def para(n, prefix="w"):
    return ParagraphBlock(text=words(n, prefix))


def sentences(count, size=10):
    return " ".join(f"{words(size - 1, f's{i}x')} end{i}." for i in range(count))


def joined_text(blocks):
    return " ".join(block.plain_text for block in blocks if block.plain_text)


class TestBudget:
    """Test greedy packing against the word budget."""

    def test_paragraphs_packed_greedily(self):
        chunks = chunk_blocks([para(40, f"p{i}x") for i in range(5)], max_words=100)

        assert [chunk.word_count for chunk in chunks] == [80, 80, 40]
        assert [chunk.index for chunk in chunks] == [0, 1, 2]

    def test_exact_fit_stays_together(self):
        chunks = chunk_blocks([para(50, "a"), para(50, "b")], max_words=100)

        assert len(chunks) == 1
        assert chunks[0].word_count == 100

    def test_text_blocks_pack_like_paragraphs(self):
        blocks = [TextBlock(text=words(60, "a")), TextBlock(text=words(60, "b"))]
        chunks = chunk_blocks(blocks, max_words=100)

        assert [chunk.word_count for chunk in chunks] == [60, 60]

    def test_empty_input(self):
        assert chunk_blocks([], max_words=100) == []

    def test_invalid_budget(self):
        with pytest.raises(ValueError):
            ContentSegmenter(max_words=0)


class TestHeadings:
    """Test heading boundaries."""

    def test_heading_opens_chunk(self):
        blocks = [para(10), HeadingBlock(level=2, text="Next part"), para(10, "b")]
        chunks = chunk_blocks(blocks, max_words=100)

        assert len(chunks) == 2
        assert chunks[1].blocks[0].type == BlockType.HEADING

    def test_leading_heading_has_no_empty_chunk(self):
        chunks = chunk_blocks([HeadingBlock(level=1, text="Title"), para(10)], max_words=100)

        assert len(chunks) == 1
        assert chunks[0].blocks[0].type == BlockType.HEADING


class TestSplitting:
    """Test sentence splitting of over-long paragraphs."""

    def test_long_paragraph_split_at_sentences(self):
        long_paragraph = ParagraphBlock(text=sentences(25))
        follow_up = para(30, "tail")
        blocks = [para(20, "head"), long_paragraph, follow_up]

        chunks = chunk_blocks(blocks, max_words=100)

        assert [chunk.word_count for chunk in chunks] == [20, 100, 100, 80]
        assert " ".join(chunk.text for chunk in chunks) == joined_text(blocks)

    def test_lone_long_sentence_stays_whole(self):
        chunks = chunk_blocks([para(150)], max_words=100)

        assert len(chunks) == 1
        assert chunks[0].word_count == 150

    def test_trailing_text_without_punctuation_kept(self):
        text = sentences(12) + " trailing words without a stop"
        chunks = chunk_blocks([ParagraphBlock(text=text)], max_words=100)

        assert " ".join(chunk.text for chunk in chunks) == text
        assert chunks[-1].text.endswith("without a stop")

    def test_split_keeps_links(self):
        link = '<a href="https://example.com/docs" target="_blank" rel="noopener">docs</a>'
        paragraph = ParagraphBlock(
            text="Read the docs first. Then try it & see.",
            inline_html=f"Read the {link} first. Then try it &amp; see.",
        )

        chunks = chunk_blocks([paragraph], max_words=5)

        assert [chunk.text for chunk in chunks] == ["Read the docs first.", "Then try it & see."]
        assert chunks[0].blocks[0].inline_html == f"Read the {link} first."
        assert chunks[1].blocks[0].inline_html == "Then try it &amp; see."

    def test_link_across_sentences_falls_back_to_text(self):
        paragraph = ParagraphBlock(
            text="Read this. And that now.",
            inline_html='Read <a href="https://example.com">this. And that</a> now.',
        )

        chunks = chunk_blocks([paragraph], max_words=2)
        fragments = [block.inline_html for chunk in chunks for block in chunk.blocks]

        assert fragments == ["Read this.", "And that now."]


class TestIndivisibleBlocks:
    """Test lists, quotes, code, math and images."""

    def test_list_moves_to_next_chunk(self):
        items = tuple(ListItem(text=words(10, f"i{i}x")) for i in range(5))
        chunks = chunk_blocks([para(80), ListBlock(ordered=False, items=items)], max_words=100)

        assert [chunk.word_count for chunk in chunks] == [80, 50]

    def test_oversized_code_not_split(self):
        chunks = chunk_blocks([CodeBlock(text=words(150))], max_words=100)

        assert len(chunks) == 1
        assert chunks[0].word_count == 150

    def test_math_starts_new_chunk_past_half_budget(self):
        chunks = chunk_blocks([para(60), MathBlock(markup="<span>x</span>", text="x")], max_words=100)

        assert len(chunks) == 2
        assert chunks[1].blocks[0].type == BlockType.MATH

    def test_math_attaches_to_small_chunk(self):
        chunks = chunk_blocks([para(30), MathBlock(markup="<span>x</span>", text="x")], max_words=100)

        assert len(chunks) == 1

    def test_math_never_overflows_a_chunk(self):
        math = MathBlock(markup="<span>...</span>", text=words(40, "m"))
        chunks = chunk_blocks([para(45), math], max_words=50)

        assert [chunk.word_count for chunk in chunks] == [45, 40]

    def test_image_starts_new_chunk_past_half_budget(self):
        image = ImageBlock(src="https://e.com/a.png")
        chunks = chunk_blocks([para(60), image, para(10, "b")], max_words=100)

        assert len(chunks) == 2
        assert chunks[1].blocks[0] == image
        assert chunks[1].word_count == 10

    def test_image_attaches_to_small_chunk(self):
        image = ImageBlock(src="https://e.com/a.png")
        chunks = chunk_blocks([para(30), image], max_words=100)

        assert len(chunks) == 1
        assert chunks[0].blocks[-1] == image


class TestProperties:
    """Test invariants over a mixed document."""

    def test_mixed_document(self):
        blocks = [
            HeadingBlock(level=1, text="Intro"),
            para(35, "a"),
            ImageBlock(src="https://e.com/1.png"),
            para(35, "b"),
            ParagraphBlock(text=sentences(15)),
            ListBlock(ordered=True, items=(ListItem(text=words(20, "l")),)),
            HeadingBlock(level=2, text="Details"),
            para(70, "c"),
            MathBlock(markup="<math></math>", text="y"),
            para(45, "d"),
        ]
        max_words = 100
        chunks = chunk_blocks(blocks, max_words=max_words)

        assert [chunk.index for chunk in chunks] == list(range(len(chunks)))
        assert " ".join(chunk.text for chunk in chunks) == joined_text(blocks)
        for chunk in chunks:
            assert chunk.blocks
            assert chunk.word_count <= max_words
        heading_chunks = [c for c in chunks if c.blocks[0].type == BlockType.HEADING]
        assert len(heading_chunks) == 2
