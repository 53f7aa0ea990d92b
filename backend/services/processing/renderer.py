"""
HTML rendering for reading slides and quiz cards.

Output is plain markup with `readable-*` classes; styling is left to the client.
"""
from typing import Optional

from models.content_models import Block, BlockType, Chunk
from models.quiz_models import QuizResult
from services.processing.utils import escape_html


def _inline(block) -> str:
    return block.inline_html or escape_html(block.text)


def render_block(block: Block) -> str:
    """Render one block to HTML."""
    if block.type == BlockType.MATH:
        # Rendered math is kept as-is
        return f'<div class="readable-math">{block.markup}</div>'

    if block.type == BlockType.HEADING:
        tag = f"h{min(max(block.level, 1), 6)}"
        return f'<{tag} class="readable-heading">{escape_html(block.text)}</{tag}>'

    if block.type in (BlockType.PARAGRAPH, BlockType.TEXT):
        return f'<p class="readable-paragraph">{_inline(block)}</p>'

    if block.type == BlockType.LIST:
        tag = 'ol' if block.ordered else 'ul'
        items = "".join(f"<li>{_inline(item)}</li>" for item in block.items)
        return f'<{tag} class="readable-list">{items}</{tag}>'

    if block.type == BlockType.QUOTE:
        return f'<blockquote class="readable-quote">{_inline(block)}</blockquote>'

    if block.type == BlockType.CODE:
        return f'<pre class="readable-code"><code>{escape_html(block.text)}</code></pre>'

    if block.type == BlockType.IMAGE:
        html = '<figure class="readable-figure">'
        html += f'<img src="{escape_html(block.src)}" alt="{escape_html(block.alt)}">'
        if block.caption:
            html += f'<figcaption>{escape_html(block.caption)}</figcaption>'
        html += '</figure>'
        return html

    return ''


def render_chunk(chunk: Chunk) -> str:
    return "".join(render_block(block) for block in chunk.blocks)


def render_title_slide(
    title: str,
    excerpt: str,
    chunk_count: int,
    question_interval: int,
    quizzes_enabled: bool,
) -> str:
    parts = ['<div class="readable-title-slide">']
    parts.append(f'<h1 class="readable-article-title">{escape_html(title)}</h1>')
    if excerpt:
        parts.append(f'<p class="readable-article-excerpt">{escape_html(excerpt)}</p>')
    parts.append('<div class="readable-article-meta">')
    parts.append(f'<span>{chunk_count} sections</span>')
    if quizzes_enabled:
        parts.append(f'<span>Quiz every {question_interval} sections</span>')
    parts.append('</div>')
    parts.append('<div class="readable-start-hint">Swipe up to start reading</div>')
    parts.append('</div>')
    return "".join(parts)


def _quiz_header(icon: str, label: str) -> str:
    return (
        '<div class="readable-quiz-header">'
        f'<span class="readable-quiz-icon">{icon}</span>'
        f'<span class="readable-quiz-label">{label}</span>'
        '</div>'
    )


def render_quiz_card(quiz: QuizResult, chunk_index: int) -> str:
    options = "".join(
        f'<button class="readable-quiz-option" data-answer="{option[0]}">{escape_html(option)}</button>'
        for option in quiz.options
    )
    return (
        f'<div class="readable-quiz" data-quiz-index="{chunk_index}">'
        + _quiz_header('?', 'Comprehension Check')
        + f'<div class="readable-quiz-question">{escape_html(quiz.question)}</div>'
        + f'<div class="readable-quiz-options">{options}</div>'
        + '<div class="readable-quiz-feedback" hidden>'
        + f'<div class="readable-quiz-explanation">{escape_html(quiz.explanation)}</div>'
        + '</div>'
        + '</div>'
    )


def render_quiz_loading(chunk_index: int) -> str:
    return (
        f'<div class="readable-quiz readable-quiz-loading" data-quiz-index="{chunk_index}">'
        + _quiz_header('?', 'Comprehension Check')
        + '<div class="readable-quiz-loading-content">'
        + '<div class="readable-quiz-spinner"></div>'
        + '<div class="readable-quiz-loading-text">Generating question...</div>'
        + '</div>'
        + '</div>'
    )


def render_quiz_error(chunk_index: int, message: Optional[str] = None) -> str:
    return (
        f'<div class="readable-quiz readable-quiz-error" data-quiz-index="{chunk_index}">'
        + _quiz_header('!', 'Quiz Unavailable')
        + '<div class="readable-quiz-error-content">'
        + f'<p>{escape_html(message or "Failed to generate question")}</p>'
        + '<p class="readable-quiz-error-hint">Swipe to continue reading</p>'
        + '</div>'
        + '</div>'
    )
