"""
Content parsing service: turns a cleaned HTML subtree into typed blocks.
"""
import copy
import re
from typing import Callable, List, Optional, Tuple, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from models.content_models import (
    Block,
    CodeBlock,
    HeadingBlock,
    ImageBlock,
    ListBlock,
    ListItem,
    MathBlock,
    ParagraphBlock,
    QuoteBlock,
    TextBlock,
)
from services.processing.utils import clean_text, escape_html

MATH_CLASSES = {'katex', 'katex-display', 'katex-html', 'MathJax', 'MathJax_Display', 'mjx-container'}
MATH_WRAPPER_CLASS = re.compile(r'\b(report-math-block|math-display|equation-block)\b')
MATH_CHILD_CLASSES = {'katex', 'katex-display', 'MathJax'}
MATH_DATA_ATTRIBUTES = ('data-latex', 'data-tex', 'data-math')
HEADING_TAGS = {'h1', 'h2', 'h3', 'h4', 'h5', 'h6'}
LAZY_SRC_ATTRIBUTES = ('data-src', 'data-lazy-src', 'data-original', 'data-srcset', 'srcset')
SAFE_LINK = re.compile(r'^(https?:|mailto:|/|#|\.)', re.I)
URL_ATTRIBUTES = {'href', 'src', 'xlink:href', 'action', 'formaction', 'srcset'}
ACTIVE_TAGS = ['script', 'iframe', 'object', 'embed', 'form']

LinkResolver = Callable[[Tag], str]


def is_math_block(node: Tag) -> bool:
    """Check if a node is a math/KaTeX block."""
    classes = set(node.get('class') or [])
    if classes & MATH_CLASSES:
        return True

    if 'katex' in (node.get('data-testid') or ''):
        return True
    if any(node.has_attr(attr) for attr in MATH_DATA_ATTRIBUTES):
        return True

    # Specific wrapper patterns only, not generic containers
    if MATH_WRAPPER_CLASS.search(" ".join(classes)):
        return True

    if node.name == 'math':
        return True

    # Small direct wrapper whose first child is a rendering
    children = [child for child in node.children if isinstance(child, Tag)]
    if children and len(children) <= 3:
        first_classes = set(children[0].get('class') or [])
        if first_classes & MATH_CHILD_CLASSES:
            return True

    return False


def sanitized_copy(node: Tag) -> Tag:
    """
    Detached copy of a subtree without event handlers or unsafe URLs.

    Layout attributes such as class and style are kept.
    """
    node = copy.copy(node)
    for el in reversed(node.find_all(ACTIVE_TAGS)):
        el.decompose()

    for el in [node] + node.find_all(True):
        for attr in list(el.attrs):
            name = attr.lower()
            if name.startswith('on'):
                del el[attr]
            elif name in URL_ATTRIBUTES and not SAFE_LINK.match(str(el.get(attr) or '').strip()):
                del el[attr]
    return node


def _is_text_node(node) -> bool:
    # Comments, CDATA, doctypes etc. are PreformattedString subclasses
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def default_link_href(anchor: Tag) -> str:
    return anchor.get('href') or ''


def inline_content(
    node: Tag,
    link_href: LinkResolver = default_link_href,
    keep_image_alt: bool = False,
) -> Tuple[str, str]:
    """
    Flatten an element into plain text and safe inline HTML.

    The HTML keeps escaped text, anchors and line breaks only.

    Returns:
        (text, inline_html)
    """
    text_parts: List[str] = []
    html_parts: List[str] = []

    def walk(current):
        for child in current.children:
            if _is_text_node(child):
                piece = re.sub(r'\s+', ' ', str(child))
                text_parts.append(piece)
                html_parts.append(escape_html(piece))
            elif isinstance(child, Tag):
                if child.name == 'br':
                    text_parts.append(' ')
                    html_parts.append('<br>')
                elif child.name == 'a':
                    link_text = re.sub(r'\s+', ' ', child.get_text())
                    href = link_href(child)
                    text_parts.append(link_text)
                    if href and SAFE_LINK.match(href):
                        html_parts.append(
                            f'<a href="{escape_html(href)}" target="_blank" rel="noopener">'
                            f'{escape_html(link_text)}</a>'
                        )
                    else:
                        html_parts.append(escape_html(link_text))
                elif child.name == 'img':
                    # Emoji images carry their character in alt
                    if keep_image_alt and child.get('alt'):
                        text_parts.append(child['alt'])
                        html_parts.append(escape_html(child['alt']))
                else:
                    walk(child)

    walk(node)
    text = clean_text("".join(text_parts))
    inline_html = "".join(html_parts).strip()
    inline_html = re.sub(r'^(<br>\s*)+|(\s*<br>)+$', '', inline_html).strip()
    return text, inline_html


def _is_tracking_pixel(img: Tag) -> bool:
    for attr in ('width', 'height'):
        value = (img.get(attr) or '').strip().lower().rstrip('px')
        if value.isdigit() and int(value) <= 1:
            return True
    return False


def resolve_image_src(img: Tag, base_url: Optional[str] = None) -> Optional[str]:
    """Image URL including lazy-load fallbacks; None for placeholders."""
    src = (img.get('src') or '').strip()
    if not src or src.startswith('data:'):
        src = ''
        for attr in LAZY_SRC_ATTRIBUTES:
            candidate = (img.get(attr) or '').strip()
            if candidate:
                # srcset: "url 1x, url 2x" - take the first URL
                src = candidate.split(',')[0].strip().split(' ')[0]
                break

    if not src or src.startswith('data:'):
        return None
    if base_url:
        src = urljoin(base_url, src)
    return src


def image_block(img: Tag, base_url: Optional[str] = None, caption: Optional[str] = None) -> Optional[ImageBlock]:
    if _is_tracking_pixel(img):
        return None
    src = resolve_image_src(img, base_url)
    if not src:
        return None
    return ImageBlock(src=src, alt=(img.get('alt') or '').strip(), caption=caption or None)


class ContentParser:
    """Walks a content root in document order and emits blocks."""

    def __init__(self, base_url: Optional[str] = None):
        self.base_url = base_url

    def parse(self, content: Union[Tag, str]) -> List[Block]:
        if isinstance(content, str):
            content = BeautifulSoup(content, 'html.parser')
        return self._process_children(content)

    def _process_children(self, node: Tag) -> List[Block]:
        blocks: List[Block] = []
        for child in node.children:
            blocks.extend(self._process_node(child))
        return blocks

    def _process_node(self, node) -> List[Block]:
        if _is_text_node(node):
            text = clean_text(str(node))
            if text:
                return [TextBlock(text=text, inline_html=escape_html(text))]
            return []

        if not isinstance(node, Tag):
            return []

        name = node.name

        # Math keeps its rendered layout
        if is_math_block(node):
            math = sanitized_copy(node)
            return [MathBlock(markup=str(math), text=clean_text(math.get_text(" ")))]

        if name in HEADING_TAGS:
            text = clean_text(node.get_text(" "))
            return [HeadingBlock(level=int(name[1]), text=text)] if text else []

        if name in ('ul', 'ol'):
            return self._parse_list(node)

        if name in ('pre', 'code'):
            code = node.get_text().strip()
            return [CodeBlock(text=code)] if code else []

        if name == 'blockquote':
            text, inline_html = inline_content(node)
            blocks = self._embedded_images(node)
            if text:
                blocks.append(QuoteBlock(text=text, inline_html=inline_html))
            return blocks

        if name == 'img':
            block = image_block(node, self.base_url)
            return [block] if block else []

        if name == 'figure':
            img = node.find('img')
            if img is None:
                return self._process_children(node)
            caption_el = node.find('figcaption')
            caption = clean_text(caption_el.get_text(" ")) if caption_el else None
            block = image_block(img, self.base_url, caption=caption)
            return [block] if block else []

        if name == 'p':
            text, inline_html = inline_content(node)
            blocks = self._embedded_images(node)
            if text:
                blocks.append(ParagraphBlock(text=text, inline_html=inline_html))
            return blocks

        return self._process_children(node)

    def _parse_list(self, node: Tag) -> List[Block]:
        items = []
        for li in node.find_all('li', recursive=False):
            text, inline_html = inline_content(li)
            if text:
                items.append(ListItem(text=text, inline_html=inline_html))
        if not items:
            return []
        return [ListBlock(ordered=node.name == 'ol', items=tuple(items))]

    def _embedded_images(self, node: Tag) -> List[Block]:
        blocks: List[Block] = []
        for img in node.find_all('img'):
            block = image_block(img, self.base_url)
            if block:
                blocks.append(block)
        return blocks


def parse_content(content: Union[Tag, str], base_url: Optional[str] = None) -> List[Block]:
    """Parse a cleaned content root (or HTML string) into ordered blocks."""
    return ContentParser(base_url=base_url).parse(content)
