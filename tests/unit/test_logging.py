import json
import logging

from flowcraft.utils.logging import JsonLogFormatter


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("flowcraft.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    record.dropped_by_reason = {"self_loop": 2}
    record.nodes = 3

    payload = json.loads(JsonLogFormatter().format(record))
    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["dropped_by_reason"] == {"self_loop": 2}
    assert payload["nodes"] == 3
    assert "pathname" not in payload
