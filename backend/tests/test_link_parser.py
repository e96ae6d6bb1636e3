"""
Link Parser Test Suite

Covers URL extraction from share text, host-based platform detection,
content reference derivation and Referer construction.
"""

import pytest

from app.models.content import ContentKind, ContentReference, Platform
from app.utils.link_parser import (
    NO_URL_MESSAGE,
    UNSUPPORTED_PLATFORM_MESSAGE,
    LinkParseError,
    NoUrlFoundError,
    UnsupportedPlatformError,
    build_referer,
    detect_platform,
    extract_url,
    require_supported_platform,
    resolve_reference,
)


# =============================================================================
# extract_url
# =============================================================================


class TestExtractUrl:
    """URL extraction from free-form share text."""

    def test_share_text_with_prose_and_emoji(self) -> None:
        text = "看看这个 https://v.douyin.com/abc123/ 超搞笑"
        assert extract_url(text) == "https://v.douyin.com/abc123/"

    def test_bare_url_returned_unchanged(self) -> None:
        url = "https://www.douyin.com/video/7300000000000000001?previous_page=app_code_link"
        assert extract_url(url) == url

    def test_bare_url_with_surrounding_whitespace(self) -> None:
        assert extract_url("  https://v.douyin.com/abc123/  ") == "https://v.douyin.com/abc123/"

    def test_trailing_ascii_punctuation_trimmed(self) -> None:
        assert extract_url("link: https://v.douyin.com/abc123/.") == "https://v.douyin.com/abc123/"
        assert extract_url("(see https://xhslink.com/a/Xyz)") == "https://xhslink.com/a/Xyz"

    def test_url_stops_at_cjk_punctuation(self) -> None:
        text = "7.99 复制打开抖音，看看【小明的作品】https://v.douyin.com/iRNBho6u/，周末去海边"
        assert extract_url(text) == "https://v.douyin.com/iRNBho6u/"

    def test_first_url_wins(self) -> None:
        text = "a https://v.kuaishou.com/first b https://v.douyin.com/second"
        assert extract_url(text) == "https://v.kuaishou.com/first"

    def test_http_scheme_accepted(self) -> None:
        assert extract_url("go http://v.douyin.com/abc/") == "http://v.douyin.com/abc/"

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("看看https://v.douyin.com/abc123/复制此链接", "https://v.douyin.com/abc123/"),
            ("http://xhslink.com/a/Ab12Cd复制本条信息", "http://xhslink.com/a/Ab12Cd"),
            ("https://v.kuaishou.com/xYz9打开快手", "https://v.kuaishou.com/xYz9"),
        ],
    )
    def test_url_stops_at_cjk_text(self, text: str, expected: str) -> None:
        assert extract_url(text) == expected

    @pytest.mark.parametrize(
        "text",
        ["", "   ", None, "no link here", "ftp://example.com/file", "www.douyin.com/video/1"],
    )
    def test_no_url_raises(self, text: str | None) -> None:
        with pytest.raises(NoUrlFoundError):
            extract_url(text)

    def test_no_url_error_carries_user_message(self) -> None:
        with pytest.raises(LinkParseError) as exc_info:
            extract_url("just words")
        assert exc_info.value.user_message == NO_URL_MESSAGE
        assert isinstance(exc_info.value, ValueError)


# =============================================================================
# detect_platform
# =============================================================================


class TestDetectPlatform:
    """Host table lookups."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://v.douyin.com/abc123/", Platform.DOUYIN),
            ("https://www.iesdouyin.com/share/video/1/", Platform.DOUYIN),
            ("https://douyin.com/video/1", Platform.DOUYIN),
            ("https://v.kuaishou.com/xyz", Platform.KUAISHOU),
            ("https://www.chenzhongtech.com/fw/photo/1", Platform.KUAISHOU),
            ("https://www.xiaohongshu.com/explore/abc", Platform.XIAOHONGSHU),
            ("http://xhslink.com/a/Xyz", Platform.XIAOHONGSHU),
            ("https://vm.tiktok.com/ZMabc/", Platform.TIKTOK),
            ("https://WWW.TIKTOK.COM/@user/video/1", Platform.TIKTOK),
        ],
    )
    def test_known_hosts(self, url: str, expected: Platform) -> None:
        assert detect_platform(url) is expected

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=1",
            "https://notdouyin.com/video/1",
            "https://douyin.com.evil.example/video/1",
            "https://example.com/?next=https://v.douyin.com/abc",
            "",
        ],
    )
    def test_unknown_hosts(self, url: str) -> None:
        assert detect_platform(url) is Platform.UNKNOWN

    def test_require_supported_platform_raises_for_unknown(self) -> None:
        with pytest.raises(UnsupportedPlatformError) as exc_info:
            require_supported_platform("https://www.youtube.com/watch?v=1")
        assert exc_info.value.user_message == UNSUPPORTED_PLATFORM_MESSAGE

    def test_platform_labels(self) -> None:
        assert Platform.DOUYIN.label == "抖音"
        assert Platform.KUAISHOU.label == "快手"
        assert Platform.XIAOHONGSHU.label == "小红书"
        assert Platform.TIKTOK.label == "TikTok"
        assert not Platform.UNKNOWN.is_supported


# =============================================================================
# resolve_reference
# =============================================================================


class TestResolveReference:
    """Content id and kind derivation."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://www.iesdouyin.com/share/video/123/", ContentReference(id="123", kind=ContentKind.VIDEO)),
            ("https://www.iesdouyin.com/share/note/456/?from=web", ContentReference(id="456", kind=ContentKind.NOTE)),
            ("https://www.douyin.com/slides/789", ContentReference(id="789", kind=ContentKind.SLIDES)),
            ("https://www.douyin.com/discover?modal_id=111", ContentReference(id="111", kind=ContentKind.VIDEO)),
            ("https://www.douyin.com/x?a=1&aweme_id=222", ContentReference(id="222", kind=ContentKind.VIDEO)),
        ],
    )
    def test_url_patterns(self, url: str, expected: ContentReference) -> None:
        assert resolve_reference(url) == expected

    def test_path_wins_over_query(self) -> None:
        reference = resolve_reference("https://www.douyin.com/video/100?modal_id=200")
        assert reference == ContentReference(id="100", kind=ContentKind.VIDEO)

    def test_html_searched_when_url_has_no_id(self) -> None:
        html = '<a href="https://www.iesdouyin.com/share/note/333/">open</a>'
        reference = resolve_reference("https://v.douyin.com/abc123/", html)
        assert reference == ContentReference(id="333", kind=ContentKind.NOTE)

    def test_url_wins_over_html(self) -> None:
        reference = resolve_reference("https://www.douyin.com/video/1", "/note/2")
        assert reference is not None
        assert reference.id == "1"

    def test_none_when_nothing_matches(self) -> None:
        assert resolve_reference("https://v.douyin.com/abc123/", "<html></html>") is None
        assert resolve_reference(None, None) is None

    def test_non_numeric_id_ignored(self) -> None:
        assert resolve_reference("https://www.douyin.com/video/abc") is None


# =============================================================================
# build_referer
# =============================================================================


class TestBuildReferer:
    """Referer derivation from a media URL's own host."""

    def test_uses_media_host(self) -> None:
        assert build_referer("https://v26.douyinvod.com/abc/video.mp4?x=1") == "https://v26.douyinvod.com/"

    def test_keeps_port(self) -> None:
        assert build_referer("http://cdn.example.com:8080/v.mp4") == "http://cdn.example.com:8080/"

    def test_falls_back_without_host(self) -> None:
        assert build_referer("not a url") == "https://www.douyin.com/"
