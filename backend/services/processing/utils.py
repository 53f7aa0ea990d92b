"""
Shared utilities for processing pipeline.
"""
import html
import re
from typing import List, Optional


def clean_text(text: str) -> str:
    """Collapse runs of whitespace into single spaces and trim."""
    return re.sub(r'\s+', ' ', text).strip()


def escape_html(text: str) -> str:
    """Escape text for safe inclusion in markup."""
    return html.escape(text or "", quote=True)


def split_into_sentences(text: str) -> List[str]:
    """
    Split text into sentences.

    Boundaries are the whitespace following terminal punctuation, so every
    word of the input ends up in exactly one sentence.
    """
    sentences = re.split(r'(?<=[.!?])\s+', text.strip())
    return [s.strip() for s in sentences if s.strip()]



def strip_tags(markup: str) -> str:
    """Visible text of inline markup; line breaks count as spaces."""
    text = re.sub(r'<br\s*/?>', ' ', markup, flags=re.I)
    return clean_text(html.unescape(re.sub(r'<[^>]+>', '', text)))


def split_inline_html(inline_html: str, sentences: List[str]) -> Optional[List[str]]:
    """
    Cut inline HTML at the same sentence boundaries as its plain text.

    Boundaries inside a link are not cut, so a link spanning two sentences
    makes the pieces disagree with the plain sentences.

    Returns:
        One HTML fragment per sentence, or None when they do not line up
    """
    pieces: List[str] = []
    current: List[str] = []
    link_depth = 0
    last_char = ''

    for token in re.split(r'(<[^>]+>)', inline_html):
        if not token:
            continue
        if token.startswith('<'):
            if re.match(r'<a\b', token, re.I):
                link_depth += 1
            elif re.match(r'</a\s*>', token, re.I):
                link_depth = max(0, link_depth - 1)
            current.append(token)
            continue

        start = 0
        if link_depth == 0:
            for match in re.finditer(r'\s+', token):
                before = token[match.start() - 1] if match.start() > 0 else last_char
                if before in '.!?':
                    current.append(token[start:match.start()])
                    pieces.append("".join(current).strip())
                    current = []
                    start = match.end()
        current.append(token[start:])
        last_char = token[-1]

    pieces.append("".join(current).strip())
    pieces = [piece for piece in pieces if piece]

    if len(pieces) != len(sentences):
        return None
    if any(strip_tags(piece) != sentence for piece, sentence in zip(pieces, sentences)):
        return None
    return pieces
