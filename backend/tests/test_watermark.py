"""
Watermark Rewrite Test Suite
"""

import pytest

from app.utils.watermark import to_no_watermark_url


class TestToNoWatermarkUrl:
    def test_playwm_segment_and_watermark_params_removed(self) -> None:
        url = "https://aweme.snssdk.com/aweme/v1/playwm/abc?logo_name=x&wm=1"
        assert to_no_watermark_url(url) == "https://aweme.snssdk.com/aweme/v1/play/abc"

    def test_trailing_playwm_segment(self) -> None:
        url = "https://aweme.snssdk.com/aweme/v1/playwm?video_id=v0abc"
        assert to_no_watermark_url(url) == "https://aweme.snssdk.com/aweme/v1/play?video_id=v0abc"

    def test_other_query_parameters_kept_in_order(self) -> None:
        url = "https://aweme.snssdk.com/aweme/v1/playwm/?video_id=v0abc&ratio=720p&watermark=1&line=0"
        assert (
            to_no_watermark_url(url)
            == "https://aweme.snssdk.com/aweme/v1/play/?video_id=v0abc&ratio=720p&line=0"
        )

    def test_escaped_slashes_unescaped(self) -> None:
        url = "https:\\u002F\\u002Faweme.snssdk.com\\u002Faweme\\u002Fv1\\u002Fplaywm\\u002Fabc"
        assert to_no_watermark_url(url) == "https://aweme.snssdk.com/aweme/v1/play/abc"

    def test_similar_segments_untouched(self) -> None:
        url = "https://cdn.example.com/playwmx/abc"
        assert to_no_watermark_url(url) == url

    def test_relative_url_uses_plain_replacement(self) -> None:
        assert to_no_watermark_url("/aweme/v1/playwm/abc") == "/aweme/v1/play/abc"

    def test_relative_url_trailing_playwm(self) -> None:
        assert to_no_watermark_url("/aweme/v1/playwm?video_id=1") == "/aweme/v1/play?video_id=1"
        assert to_no_watermark_url("/aweme/v1/playwm") == "/aweme/v1/play"

    def test_empty_string(self) -> None:
        assert to_no_watermark_url("") == ""

    @pytest.mark.parametrize(
        "url",
        [
            "https://aweme.snssdk.com/aweme/v1/playwm/abc?logo_name=x&wm=1",
            "https://v26.douyinvod.com/path/video.mp4?a=1&b=%2B&c=",
            "https://aweme.snssdk.com/aweme/v1/play/?video_id=v0abc&ratio=720p",
            "/aweme/v1/playwm/abc",
            "/aweme/v1/playwm?video_id=1",
        ],
    )
    def test_idempotent(self, url: str) -> None:
        once = to_no_watermark_url(url)
        assert to_no_watermark_url(once) == once
