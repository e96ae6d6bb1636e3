"""
Content Model Test Suite

Validity rules and envelope serialization for ContentItem.
"""

import pytest

from app.models.content import ContentItem, ContentType, ResolveResponse


VIDEO_URL = "https://aweme.snssdk.com/aweme/v1/play/?video_id=v0abc"


class TestContentItemValidity:
    def test_video_item(self) -> None:
        item = ContentItem(video_url=VIDEO_URL, type=ContentType.VIDEO)

        assert item.is_valid()
        assert item.is_valid()

    def test_image_item(self) -> None:
        item = ContentItem(images=["a.jpg", "b.jpg"], type=ContentType.IMAGE)

        assert item.is_valid()
        assert item.is_valid()

    @pytest.mark.parametrize(
        "fields",
        [
            {"type": ContentType.IMAGE, "images": []},
            {"type": ContentType.IMAGE, "images": None, "video_url": "x"},
            {"type": ContentType.VIDEO},
            {"type": ContentType.VIDEO, "video_url": "   "},
            {"type": ContentType.VIDEO, "images": []},
            {"type": ContentType.VIDEO, "images": ["a.jpg"]},
        ],
    )
    def test_missing_or_mismatched_media_is_invalid(self, fields: dict) -> None:
        assert not ContentItem(**fields).is_valid()

    @pytest.mark.parametrize("content_type", [ContentType.VIDEO, ContentType.IMAGE])
    def test_both_media_kinds_populated_is_invalid(self, content_type: ContentType) -> None:
        item = ContentItem(video_url=VIDEO_URL, images=["a.jpg"], type=content_type)

        assert not item.is_valid()
        assert not item.is_valid()


class TestSerialization:
    def test_camel_case_aliases_and_dropped_optionals(self) -> None:
        item = ContentItem(title="t", video_url=VIDEO_URL, music_url="https://m/1.mp3")

        body = item.to_response()

        assert body["videoUrl"] == VIDEO_URL
        assert body["musicUrl"] == "https://m/1.mp3"
        assert body["type"] == "video"
        assert "images" not in body
        assert "likes" not in body

    def test_alias_input_accepted(self) -> None:
        item = ContentItem.model_validate({"videoUrl": VIDEO_URL})

        assert item.video_url == VIDEO_URL

    def test_error_envelope(self) -> None:
        assert ResolveResponse(success=False, error="解析失败").to_response() == {
            "success": False,
            "error": "解析失败",
        }
