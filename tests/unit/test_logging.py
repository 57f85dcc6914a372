import io
import json
import logging

from portal.logging import setup_logging


def test_setup_logging_emits_json_with_static_fields(monkeypatch):
    buf = io.StringIO()
    monkeypatch.setattr("sys.stdout", buf)
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level

    try:
        setup_logging("debug", static_fields={"app": "Posterns", "env": "test"})
        logging.getLogger("portal.test").info("hello", extra={"user_id": "u1"})
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

    line = json.loads(buf.getvalue().strip().splitlines()[-1])
    assert line["message"] == "hello"
    assert line["levelname"] == "INFO"
    assert line["name"] == "portal.test"
    assert line["user_id"] == "u1"
    assert line["app"] == "Posterns"
    assert line["env"] == "test"


def test_setup_logging_quiets_http_client_loggers():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("psycopg.pool").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
