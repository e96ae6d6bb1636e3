"""
Logging Utilities Test Suite
"""

import json
import logging

from app.utils.logger import JSONFormatter, StandardFormatter, add_log_context


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="app.test", level=logging.INFO, pathname=__file__, lineno=1,
        msg="Strategy %s", args=("succeeded",), exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatters:
    def test_json_formatter_includes_context(self) -> None:
        output = json.loads(JSONFormatter().format(make_record(platform="douyin", strategy="tikwm")))

        assert output["level"] == "INFO"
        assert output["logger"] == "app.test"
        assert output["message"] == "Strategy succeeded"
        assert output["extra"] == {"platform": "douyin", "strategy": "tikwm"}
        assert "source" not in output

    def test_json_formatter_source_location(self) -> None:
        output = json.loads(JSONFormatter(include_source_location=True).format(make_record()))

        assert output["source"]["lineno"] == 1

    def test_standard_formatter_appends_context(self) -> None:
        line = StandardFormatter().format(make_record(strategy="tikwm"))

        assert "app.test: Strategy succeeded [strategy=tikwm]" in line


class TestAddLogContext:
    def test_adapters_stack(self, caplog) -> None:
        logger = logging.getLogger("app.test.context")
        ctx = add_log_context(add_log_context(logger, platform="douyin"), strategy="tikwm")

        with caplog.at_level(logging.INFO, logger="app.test.context"):
            ctx.info("hello")

        record = caplog.records[-1]
        assert record.platform == "douyin"
        assert record.strategy == "tikwm"

    def test_explicit_extra_wins(self, caplog) -> None:
        logger = logging.getLogger("app.test.context")
        ctx = add_log_context(logger, strategy="tikwm")

        with caplog.at_level(logging.INFO, logger="app.test.context"):
            ctx.info("hello", extra={"strategy": "vvhan"})

        assert caplog.records[-1].strategy == "vvhan"
