import json
import logging

from health_wallet.logging_config import JsonFormatter, setup_logging


def test_setup_logging_sets_level():
    setup_logging("warning")
    assert logging.getLogger().level == logging.WARNING
    setup_logging("INFO")
    assert logging.getLogger().level == logging.INFO


def test_json_formatter_emits_one_object():
    record = logging.LogRecord("health_wallet.test", logging.INFO, __file__, 1, "stored %s", ("blob",), None)
    line = JsonFormatter().format(record)
    data = json.loads(line)
    assert data["message"] == "stored blob"
    assert data["level"] == "INFO"
    assert data["logger"] == "health_wallet.test"
