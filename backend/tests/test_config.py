"""
Configuration Test Suite
"""

import pytest

from pydantic import ValidationError

from app.config import DEFAULT_STRATEGY_ORDER, Settings


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)

        assert settings.app_env == "development"
        assert settings.request_timeout_seconds == 10.0
        assert settings.max_redirects == 10
        assert settings.enabled_strategies == DEFAULT_STRATEGY_ORDER
        assert settings.cors_origins == ["*"]
        assert settings.share_page_base_url == "https://www.iesdouyin.com/share"
        assert settings.is_development

    def test_comma_separated_environment_lists(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENABLED_STRATEGIES", "TikWM, vvhan,,douyin_hybrid")
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")

        settings = Settings(_env_file=None)

        assert settings.enabled_strategies == ["tikwm", "vvhan", "douyin_hybrid"]
        assert settings.cors_origins == ["https://a.example", "https://b.example"]

    def test_log_level_normalized(self) -> None:
        assert Settings(_env_file=None, log_level="DEBUG").log_level == "debug"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"log_level": "verbose"},
            {"app_env": "qa"},
            {"request_timeout_seconds": 0.5},
            {"request_timeout_seconds": 120},
            {"disconnect_poll_interval_seconds": 0},
        ],
    )
    def test_invalid_values_rejected(self, overrides: dict) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **overrides)
