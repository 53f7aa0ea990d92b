"""
Web article extractor using requests and BeautifulSoup.

Scores candidate subtrees to find the main article body and strips page
chrome around it.
"""
import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

import requests
from bs4 import BeautifulSoup, Tag

from core.config import FETCH_TIMEOUT_SECONDS, FETCH_USER_AGENT
from core.exceptions import ArticleFetchError, NoArticleFound
from services.processing.utils import clean_text

logger = logging.getLogger(__name__)

UNLIKELY_CANDIDATES = re.compile(
    r'-ad-|ai2html|banner|breadcrumbs|combx|comment|community|cover-wrap|disqus|extra|footer|gdpr|'
    r'header|legends|menu|related|remark|replies|rss|shoutbox|sidebar|skyscraper|social|sponsor|'
    r'supplemental|ad-break|agegate|pagination|pager|popup|yom-hierarchical-navigation',
    re.I,
)
OK_MAYBE_ITS_A_CANDIDATE = re.compile(r'and|article|body|column|content|main|shadow', re.I)
POSITIVE = re.compile(
    r'article|body|content|entry|hentry|h-entry|main|page|pagination|post|text|blog|story', re.I
)
NEGATIVE = re.compile(
    r'hidden|^hid$| hid$| hid |^hid |banner|combx|comment|com-|contact|foot|footer|footnote|gdpr|'
    r'masthead|media|meta|outbrain|promo|related|scroll|share|shoutbox|sidebar|skyscraper|sponsor|'
    r'shopping|tags|tool|widget',
    re.I,
)

ARTICLE_SELECTOR = 'article, [role="article"], main, [role="main"]'
MIN_PARAGRAPH_LENGTH = 25
STRIPPED_TAGS = [
    'script', 'style', 'noscript', 'iframe', 'form', 'button', 'input',
    'textarea', 'select', 'nav', 'aside', 'footer', 'header',
    'head', 'title', 'meta', 'link',
]
TABLE_TAGS = {'table', 'thead', 'tbody', 'tr', 'th', 'td'}
MATH_CLASSES = {
    'katex', 'katex-display', 'katex-html', 'katex-mathml', 'math',
    'MathJax', 'MathJax_Display', 'mjx-container',
}


@dataclass
class ExtractedArticle:
    """Cleaned main content of a page"""
    title: str
    content: Tag
    excerpt: str = ""

    @property
    def text_content(self) -> str:
        return clean_text(self.content.get_text(" "))


def _match_string(el: Tag) -> str:
    return " ".join(el.get('class') or []) + " " + (el.get('id') or "")


def is_unlikely_candidate(el: Tag) -> bool:
    """Class/id looks like page chrome and nothing rescues it."""
    match_string = _match_string(el)
    return bool(
        UNLIKELY_CANDIDATES.search(match_string)
        and not OK_MAYBE_ITS_A_CANDIDATE.search(match_string)
    )


def is_math_element(el: Tag) -> bool:
    """Element is (or sits inside) a math rendering whose layout must be kept."""
    if el.name == 'math':
        return True

    classes = el.get('class') or []
    if any(cls in MATH_CLASSES for cls in classes):
        return True

    class_string = " ".join(classes)
    if 'katex' in class_string or 'math' in class_string or 'MathJax' in class_string:
        return True

    for parent in el.parents:
        if not isinstance(parent, Tag) or parent.name == '[document]':
            break
        parent_classes = parent.get('class') or []
        if any(cls in ('katex', 'MathJax', 'report-math-block') for cls in parent_classes):
            return True
        if 'katex' in (parent.get('data-testid') or ''):
            return True

    return False


def _is_hidden(el: Tag) -> bool:
    if el.has_attr('hidden'):
        return True
    style = (el.get('style') or '').replace(' ', '').lower()
    return 'display:none' in style


def _inside_svg(el: Tag) -> bool:
    return el.name == 'svg' or el.find_parent('svg') is not None


class ArticleExtractor:
    """Finds and cleans the main article body of an HTML document."""

    def fetch_html(self, url: str) -> str:
        """Download a page and return its HTML."""
        headers = {'User-Agent': FETCH_USER_AGENT}
        try:
            response = requests.get(url, headers=headers, timeout=FETCH_TIMEOUT_SECONDS)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ArticleFetchError(f"Failed to fetch article: {e}") from e
        return response.text

    def fetch_article(self, url: str) -> ExtractedArticle:
        """Fetch a page and extract its article content."""
        return self.extract(self.fetch_html(url))

    def extract(self, html: str) -> ExtractedArticle:
        """
        Extract article content from an HTML document.

        Returns:
            ExtractedArticle with title, cleaned content root and excerpt

        Raises:
            NoArticleFound: no text survives cleaning
        """
        soup = BeautifulSoup(html or "", 'html.parser')

        title = self._get_article_title(soup)
        excerpt = self._get_excerpt(soup)

        content = self._grab_article(soup)
        if content is None:
            raise NoArticleFound("Could not extract article content from this page")

        self._prep_article(content)

        if not content.get_text(strip=True):
            raise NoArticleFound("Could not extract article content from this page")

        logger.info(f"Extracted article '{title}' ({len(content.get_text(' ').split())} words)")
        return ExtractedArticle(title=title, content=content, excerpt=excerpt)

    def _get_article_title(self, soup: BeautifulSoup) -> str:
        """h1 matching the document title, else og:title, else <title>."""
        doc_title = ""
        if soup.title:
            doc_title = clean_text(soup.title.get_text())

        h1 = soup.find('h1')
        if h1:
            h1_text = clean_text(h1.get_text())
            if h1_text and doc_title and (
                h1_text.lower() in doc_title.lower() or doc_title.lower() in h1_text.lower()
            ):
                return h1_text

        og_title = soup.find('meta', property='og:title')
        if og_title and og_title.get('content', '').strip():
            return og_title['content'].strip()

        return doc_title

    def _get_excerpt(self, soup: BeautifulSoup) -> str:
        meta = soup.find('meta', attrs={'name': 'description'}) or soup.find(
            'meta', property='og:description'
        )
        if meta:
            return meta.get('content', '').strip()
        return ""

    def _grab_article(self, soup: BeautifulSoup) -> Optional[Tag]:
        # Semantic containers win outright
        article = soup.select_one(ARTICLE_SELECTOR)
        if article is not None:
            return article

        best = self._best_candidate(soup)
        if best is not None:
            return best

        # Fallback: body content, or the whole fragment
        return soup.body or soup

    def _best_candidate(self, soup: BeautifulSoup) -> Optional[Tag]:
        """Parent of qualifying paragraphs with the highest score."""
        candidates: Dict[int, Dict] = {}

        for p in soup.find_all('p'):
            parent = p.parent
            if parent is None or parent.name in ('html', 'body', '[document]'):
                continue

            if is_unlikely_candidate(parent):
                continue

            text_length = len(p.get_text().strip())
            if text_length < MIN_PARAGRAPH_LENGTH:
                continue

            data = candidates.setdefault(id(parent), {"element": parent, "count": 0, "text_length": 0})
            data["count"] += 1
            data["text_length"] += text_length

        best_candidate = None
        best_score = 0.0

        for data in candidates.values():
            score = self.score_candidate(data["element"], data["count"], data["text_length"])
            # Strict comparison keeps the first of equal scores
            if score > best_score:
                best_score = score
                best_candidate = data["element"]

        return best_candidate

    @staticmethod
    def score_candidate(element: Tag, paragraph_count: int, text_length: int) -> float:
        """paragraphs + text/100, boosted or damped by class/id keywords."""
        score = paragraph_count + text_length / 100
        match_string = _match_string(element)
        if POSITIVE.search(match_string):
            score *= 1.5
        if NEGATIVE.search(match_string):
            score *= 0.5
        return score

    def _prep_article(self, content: Tag) -> None:
        """Strip chrome, hidden nodes and presentational styles in place."""
        # Reverse document order: descendants are handled before their ancestors
        for el in reversed(content.find_all(True)):
            if _is_hidden(el) and not is_math_element(el):
                el.decompose()

        for el in reversed(content.find_all(STRIPPED_TAGS)):
            el.decompose()

        self._clean_styles(content)

        for el in reversed(content.find_all(True)):
            if is_math_element(el):
                continue
            if is_unlikely_candidate(el):
                el.decompose()

    def _clean_styles(self, content: Tag) -> None:
        elements: List[Tag] = [content]
        elements.extend(content.find_all(True))
        for el in elements:
            if not el.has_attr('style') or el.name in TABLE_TAGS:
                continue
            if is_math_element(el) or _inside_svg(el):
                continue
            del el['style']


# Global article extractor instance
article_extractor = ArticleExtractor()
