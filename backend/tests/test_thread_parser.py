"""
Unit tests for Twitter/X thread extraction.
"""
import pytest

from models.content_models import BlockType, ImageBlock
from services.ingestion.thread_parser import extract_thread, get_thread_author, is_twitter_thread

THREAD_URL = "https://x.com/alice/status/1234567890"


def tweet(author, text_html, photos="", inner=""):
    photo_html = '<div data-testid="tweetPhoto">' + photos + '</div>' if photos else ''
    return f"""
    <div data-testid="tweet">
      <div data-testid="User-Name"><a href="/{author}">{author.title()}</a></div>
      <div data-testid="tweetText">{text_html}</div>
      {photo_html}
      {inner}
    </div>
    """


def page(*tweets):
    return "<html><body><main>" + "".join(tweets) + "</main></body></html>"


class TestThreadDetection:
    """Test URL checks."""

    @pytest.mark.parametrize("url", [
        "https://twitter.com/alice/status/1",
        "https://x.com/alice/status/42",
        "https://mobile.twitter.com/alice/status/42",
    ])
    def test_status_pages(self, url):
        assert is_twitter_thread(url) is True

    @pytest.mark.parametrize("url", [
        "https://x.com/alice",
        "https://example.com/alice/status/42",
        "https://notx.com/alice/status/42",
        None,
    ])
    def test_other_pages(self, url):
        assert is_twitter_thread(url) is False

    def test_author_from_url(self):
        assert get_thread_author("https://x.com/Alice/status/1") == "alice"
        assert get_thread_author("https://x.com/home") is None


class TestThreadExtraction:
    """Test post selection and block building."""

    def test_owner_posts_only(self):
        html = page(
            tweet("alice", "<span>First post in the thread</span>"),
            tweet("bob", "<span>A reply from someone else</span>"),
            tweet("alice", "<span>Second post in the thread</span>"),
        )
        thread = extract_thread(html, THREAD_URL)

        assert thread.tweet_count == 2
        assert thread.author == "@alice"
        assert [block.text for block in thread.blocks] == [
            "First post in the thread",
            "Second post in the thread",
        ]
        assert thread.title == "First post in the thread"
        assert thread.excerpt == "@alice - 2 tweets"

    def test_duplicate_posts_dropped(self):
        html = page(
            tweet("alice", "<span>Same words</span>"),
            tweet("alice", "<span>Same words</span>"),
        )
        thread = extract_thread(html, THREAD_URL)

        assert thread.tweet_count == 1

    def test_quoted_posts_skipped(self):
        quoted = tweet("alice", "<span>Quoted older post</span>")
        html = page(tweet("alice", "<span>Main post</span>", inner=quoted))
        thread = extract_thread(html, THREAD_URL)

        assert thread.tweet_count == 1
        assert [block.text for block in thread.blocks] == ["Main post"]

    def test_short_links_expanded_and_emoji_kept(self):
        text = (
            '<span>Great read </span><img alt="🔥" src="https://abs.twimg.com/emoji/fire.svg">'
            '<a href="https://t.co/abc" title="https://example.com/full-article">example.com/full…</a>'
        )
        thread = extract_thread(page(tweet("alice", text)), THREAD_URL)
        paragraph = thread.blocks[0]

        assert paragraph.type == BlockType.PARAGRAPH
        assert "🔥" in paragraph.text
        assert 'href="https://example.com/full-article"' in paragraph.inline_html

    def test_images_follow_text(self):
        photos = (
            '<img src="https://pbs.twimg.com/media/abc?format=jpg&name=small" alt="Chart">'
            '<img src="https://pbs.twimg.com/profile_images/1/me.jpg">'
        )
        thread = extract_thread(page(tweet("alice", "<span>Look at this</span>", photos=photos)), THREAD_URL)

        assert [block.type for block in thread.blocks] == [BlockType.PARAGRAPH, BlockType.IMAGE]
        assert thread.blocks[1] == ImageBlock(
            src="https://pbs.twimg.com/media/abc?format=jpg&name=large", alt="Chart"
        )

    def test_long_first_post_truncated_in_title(self):
        long_text = "word " * 40
        thread = extract_thread(page(tweet("alice", f"<span>{long_text}</span>")), THREAD_URL)

        assert thread.title == long_text.strip()[:100] + "..."

    def test_image_only_thread_title(self):
        photos = '<img src="https://pbs.twimg.com/media/abc?format=jpg&name=small">'
        thread = extract_thread(page(tweet("alice", "", photos=photos)), THREAD_URL)

        assert thread.title == "@alice thread"
        assert thread.tweet_count == 1

    def test_no_owner_posts_returns_none(self):
        assert extract_thread(page(tweet("bob", "<span>Not the owner</span>")), THREAD_URL) is None

    def test_no_posts_returns_none(self):
        assert extract_thread("<html><body><p>Nothing</p></body></html>", THREAD_URL) is None
