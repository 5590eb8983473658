import logging

from sqlalchemy import text

from dentistry_api import database


def slow_query_messages(caplog):
    return [r.getMessage() for r in caplog.records if "Slow query" in r.getMessage()]


def test_queries_over_threshold_are_logged(monkeypatch, caplog, db):
    monkeypatch.setattr(database, "SLOW_QUERY_THRESHOLD", -1.0)

    with caplog.at_level(logging.WARNING, logger="dentistry_api.database"):
        db.execute(text("SELECT 1"))

    messages = slow_query_messages(caplog)
    assert len(messages) == 1
    assert "SELECT 1" in messages[0]


def test_fast_queries_are_not_logged(monkeypatch, caplog, db):
    monkeypatch.setattr(database, "SLOW_QUERY_THRESHOLD", 60.0)

    with caplog.at_level(logging.WARNING, logger="dentistry_api.database"):
        db.execute(text("SELECT 1"))

    assert slow_query_messages(caplog) == []
