"""
Twitter/X thread parser.

Converts a rendered status page into content blocks, keeping only the posts
written by the thread owner.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from models.content_models import Block, ExtractedThread, ImageBlock, ParagraphBlock
from services.processing.block_parser import inline_content

logger = logging.getLogger(__name__)

TWITTER_HOSTS = ('twitter.com', 'x.com')
STATUS_PATH = re.compile(r'/status/\d+')
AUTHOR_PATH = re.compile(r'^/([^/]+)/status')
TITLE_MAX_CHARS = 100


@dataclass
class Tweet:
    author: str = ""
    text: str = ""
    html: str = ""
    images: List[ImageBlock] = field(default_factory=list)


def is_twitter_thread(url: Optional[str]) -> bool:
    """Status page on twitter.com / x.com (or a subdomain)."""
    if not url:
        return False
    parsed = urlparse(url)
    host = (parsed.hostname or '').lower()
    if not any(host == h or host.endswith('.' + h) for h in TWITTER_HOSTS):
        return False
    return bool(STATUS_PATH.search(parsed.path))


def get_thread_author(url: str) -> Optional[str]:
    match = AUTHOR_PATH.match(urlparse(url).path)
    return match.group(1).lower() if match else None


def _tweet_link_href(anchor: Tag) -> str:
    href = anchor.get('href') or ''
    # Shortened links carry the real URL in the title
    if 't.co' in href:
        title = anchor.get('title') or anchor.get_text()
        if title.startswith('http'):
            href = title
    return href


def extract_tweet(tweet_el: Tag) -> Tweet:
    tweet = Tweet()

    user_name = tweet_el.select_one('[data-testid="User-Name"]')
    if user_name:
        handle = user_name.select_one('a[href^="/"]')
        if handle:
            tweet.author = handle['href'].replace('/', '', 1).lower()

    text_el = tweet_el.select_one('[data-testid="tweetText"]')
    if text_el:
        tweet.text, tweet.html = inline_content(text_el, link_href=_tweet_link_href, keep_image_alt=True)

    for img in tweet_el.select('[data-testid="tweetPhoto"] img'):
        src = img.get('src') or ''
        if not src or 'profile_images' in src:
            continue
        src = re.sub(r'&name=\w+', '&name=large', src)
        tweet.images.append(ImageBlock(src=src, alt=img.get('alt') or ''))

    return tweet


def _is_nested_tweet(tweet_el: Tag) -> bool:
    return tweet_el.find_parent(attrs={'data-testid': 'tweet'}) is not None


def extract_thread(html: str, url: str) -> Optional[ExtractedThread]:
    """
    Extract the owner's posts from a thread page.

    Returns:
        ExtractedThread, or None when no usable post is found
    """
    author = get_thread_author(url)
    if not author:
        return None

    soup = BeautifulSoup(html or "", 'html.parser')
    tweet_els = soup.select('[data-testid="tweet"]')
    if not tweet_els:
        return None

    tweets: List[Tweet] = []
    seen_texts = set()

    for tweet_el in tweet_els:
        # Quoted posts are rendered inside the quoting post
        if _is_nested_tweet(tweet_el):
            continue

        tweet = extract_tweet(tweet_el)
        if tweet.author != author:
            continue
        if not tweet.text and not tweet.images:
            continue
        if tweet.text:
            if tweet.text in seen_texts:
                continue
            seen_texts.add(tweet.text)

        tweets.append(tweet)

    if not tweets:
        return None

    first_text = tweets[0].text
    if len(first_text) > TITLE_MAX_CHARS:
        title = first_text[:TITLE_MAX_CHARS] + '...'
    elif first_text:
        title = first_text
    else:
        title = f"@{author} thread"

    blocks: List[Block] = []
    for tweet in tweets:
        if tweet.text:
            blocks.append(ParagraphBlock(text=tweet.text, inline_html=tweet.html))
        blocks.extend(tweet.images)

    logger.info(f"Extracted thread by @{author} ({len(tweets)} posts)")
    return ExtractedThread(title=title, author=f"@{author}", tweet_count=len(tweets), blocks=blocks)
