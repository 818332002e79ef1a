import logging

import orjson

from tenderharvest.core.logging import (
    ContextualLogger,
    JSONFormatter,
    get_contextual_logger,
    get_logger,
    setup_logging,
)


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("tenderharvest.runner", logging.WARNING, __file__, 1, "Failed URL", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:

    def test_context_keys_flattened(self):
        line = JSONFormatter().format(make_record(source="bergrivier", url="https://x/tenders"))
        entry = orjson.loads(line)

        assert entry["level"] == "WARNING"
        assert entry["msg"] == "Failed URL"
        assert entry["source"] == "bergrivier"
        assert entry["url"] == "https://x/tenders"
        assert "document" not in entry


class TestContextualLogger:

    def test_bound_context(self):
        log = get_contextual_logger("runner", source="bergrivier", run_id="abc123")
        assert isinstance(log, ContextualLogger)
        assert log.source == "bergrivier"
        assert log.run_id == "abc123"

        _, kwargs = log.bind(url="https://x/a.pdf").process("msg", {})
        assert kwargs["extra"] == {"source": "bergrivier", "run_id": "abc123", "url": "https://x/a.pdf"}

    def test_call_site_extra_wins(self):
        log = get_contextual_logger("runner", source="bergrivier")
        _, kwargs = log.process("msg", {"extra": {"source": "other"}})
        assert kwargs["extra"]["source"] == "other"


class TestSetupLogging:

    def test_file_receives_json_lines(self, tmp_path):
        log_file = tmp_path / "logs" / "run.jsonl"
        setup_logging(level="WARNING", log_file=log_file, rich_console=False)

        get_contextual_logger("runner", source="bergrivier").debug("kept in file")
        for handler in get_logger().handlers:
            handler.flush()

        entry = orjson.loads(log_file.read_text(encoding="utf-8").splitlines()[0])
        assert entry["msg"] == "kept in file"
        assert entry["source"] == "bergrivier"
        assert entry["logger"] == "tenderharvest.runner"

    def test_repeat_setup_replaces_handlers(self):
        setup_logging(rich_console=False)
        logger = setup_logging(rich_console=False)
        assert len(logger.handlers) == 1
