"""
Segmentation service: greedily packs content blocks into word-budgeted chunks.
"""
import logging
from typing import List, Sequence

from core.config import CHUNK_SIZE_WORDS
from models.content_models import Block, BlockType, Chunk, ParagraphBlock, count_words
from services.processing.utils import escape_html, split_inline_html, split_into_sentences

logger = logging.getLogger(__name__)

SPLITTABLE_TYPES = (BlockType.PARAGRAPH, BlockType.TEXT)
UNSPLITTABLE_TYPES = (BlockType.LIST, BlockType.QUOTE, BlockType.CODE)


class _ChunkBuilder:
    """Accumulates blocks for the chunk currently being filled."""

    def __init__(self):
        self.chunks: List[Chunk] = []
        self.blocks: List[Block] = []
        self.word_count = 0

    def add(self, block: Block) -> None:
        self.blocks.append(block)
        self.word_count += count_words(block.plain_text)

    def flush(self) -> None:
        if not self.blocks:
            return
        # Indices are assigned in emission order and never change
        self.chunks.append(Chunk(index=len(self.chunks), blocks=tuple(self.blocks)))
        self.blocks = []
        self.word_count = 0

    def exceeds(self, words: int, max_words: int) -> bool:
        return bool(self.blocks) and self.word_count + words > max_words


class ContentSegmenter:
    """Single pass greedy chunker over an ordered block list."""

    def __init__(self, max_words: int = CHUNK_SIZE_WORDS):
        if max_words < 1:
            raise ValueError(f"max_words must be at least 1, got {max_words}")
        self.max_words = max_words

    def chunk(self, blocks: Sequence[Block]) -> List[Chunk]:
        """
        Group blocks into chunks of at most max_words words.

        Lists, quotes, code and math are never split and may exceed the budget
        on their own. Over-long paragraphs are split at sentence boundaries.
        """
        builder = _ChunkBuilder()
        max_words = self.max_words
        half = max_words / 2

        for block in blocks:
            words = count_words(block.plain_text)

            if block.type == BlockType.HEADING:
                builder.flush()
                builder.add(block)

            elif block.type in SPLITTABLE_TYPES:
                if words > max_words:
                    builder.flush()
                    self._split_paragraph(block, builder)
                else:
                    if builder.exceeds(words, max_words):
                        builder.flush()
                    builder.add(block)

            elif block.type in UNSPLITTABLE_TYPES:
                if builder.exceeds(words, max_words):
                    builder.flush()
                builder.add(block)

            elif block.type == BlockType.MATH:
                if builder.word_count > half or builder.exceeds(words, max_words):
                    builder.flush()
                builder.add(block)

            elif block.type == BlockType.IMAGE:
                if builder.word_count > half:
                    builder.flush()
                builder.add(block)

            else:
                if builder.exceeds(words, max_words):
                    builder.flush()
                builder.add(block)

        builder.flush()
        logger.debug(f"Segmented {len(blocks)} blocks into {len(builder.chunks)} chunks")
        return builder.chunks

    def _split_paragraph(self, block: Block, builder: _ChunkBuilder) -> None:
        sentences = split_into_sentences(block.plain_text)
        # Links survive when no link spans a sentence boundary
        fragments = None
        if block.inline_html:
            fragments = split_inline_html(block.inline_html, sentences)
        if fragments is None:
            fragments = [escape_html(sentence) for sentence in sentences]

        # The last sentence group stays open so following blocks can join it
        for sentence, fragment in zip(sentences, fragments):
            words = count_words(sentence)
            if builder.exceeds(words, self.max_words):
                builder.flush()
            builder.add(ParagraphBlock(text=sentence, inline_html=fragment))


def chunk_blocks(blocks: Sequence[Block], max_words: int = CHUNK_SIZE_WORDS) -> List[Chunk]:
    """Convenience wrapper around ContentSegmenter."""
    return ContentSegmenter(max_words=max_words).chunk(blocks)
