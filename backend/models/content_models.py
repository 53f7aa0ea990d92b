"""
Data models for extracted content blocks and reading chunks.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional, Tuple, Union


class BlockType(str, Enum):
    """Kinds of content blocks"""
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    TEXT = "text"
    LIST = "list"
    QUOTE = "quote"
    CODE = "code"
    IMAGE = "image"
    MATH = "math"


@dataclass(frozen=True)
class HeadingBlock:
    level: int  # 1-6
    text: str
    type: ClassVar[BlockType] = BlockType.HEADING

    @property
    def plain_text(self) -> str:
        return self.text


@dataclass(frozen=True)
class ParagraphBlock:
    text: str
    inline_html: str = ""  # escaped text plus <a>/<br> only
    type: ClassVar[BlockType] = BlockType.PARAGRAPH

    @property
    def plain_text(self) -> str:
        return self.text


@dataclass(frozen=True)
class TextBlock:
    """Bare text node found between block elements"""
    text: str
    inline_html: str = ""
    type: ClassVar[BlockType] = BlockType.TEXT

    @property
    def plain_text(self) -> str:
        return self.text


@dataclass(frozen=True)
class ListItem:
    text: str
    inline_html: str = ""


@dataclass(frozen=True)
class ListBlock:
    ordered: bool
    items: Tuple[ListItem, ...]
    type: ClassVar[BlockType] = BlockType.LIST

    @property
    def plain_text(self) -> str:
        return " ".join(item.text for item in self.items)


@dataclass(frozen=True)
class QuoteBlock:
    text: str
    inline_html: str = ""
    type: ClassVar[BlockType] = BlockType.QUOTE

    @property
    def plain_text(self) -> str:
        return self.text


@dataclass(frozen=True)
class CodeBlock:
    text: str
    type: ClassVar[BlockType] = BlockType.CODE

    @property
    def plain_text(self) -> str:
        return self.text


@dataclass(frozen=True)
class ImageBlock:
    src: str
    alt: str = ""
    caption: Optional[str] = None
    type: ClassVar[BlockType] = BlockType.IMAGE

    @property
    def plain_text(self) -> str:
        return ""


@dataclass(frozen=True)
class MathBlock:
    """Rendered math kept as an opaque markup unit"""
    markup: str
    text: str = ""  # for word counting and quiz context
    type: ClassVar[BlockType] = BlockType.MATH

    @property
    def plain_text(self) -> str:
        return self.text


Block = Union[
    HeadingBlock,
    ParagraphBlock,
    TextBlock,
    ListBlock,
    QuoteBlock,
    CodeBlock,
    ImageBlock,
    MathBlock,
]


def count_words(text: str) -> int:
    """Count whitespace-separated words."""
    return len(text.split())


@dataclass(frozen=True)
class Chunk:
    """Word-budgeted group of blocks shown as one reading slide"""
    index: int  # stable identity, never reassigned
    blocks: Tuple[Block, ...] = field(default_factory=tuple)

    @property
    def text(self) -> str:
        """Space-joined plain text of all blocks"""
        return " ".join(block.plain_text for block in self.blocks if block.plain_text)

    @property
    def word_count(self) -> int:
        return count_words(self.text)


@dataclass
class ExtractedThread:
    """Twitter/X thread converted into content blocks"""
    title: str
    author: str
    tweet_count: int
    blocks: List[Block] = field(default_factory=list)

    @property
    def excerpt(self) -> str:
        return f"{self.author} - {self.tweet_count} tweets"
