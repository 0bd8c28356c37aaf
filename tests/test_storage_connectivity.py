import pytest
from sqlalchemy.pool import StaticPool

import muxsync.storage.db as db_module


class _DummyConnection:
    def execute(self, _statement):
        return 1

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        del exc_type, exc, tb
        return False


class _DummyEngine:
    def connect(self):
        return _DummyConnection()


class _BrokenEngine:
    def connect(self):
        raise RuntimeError("connection refused")


def test_db_connection_success(monkeypatch) -> None:
    monkeypatch.setattr(db_module, "get_engine", lambda: _DummyEngine())
    ok, error = db_module.test_connection()
    assert ok is True
    assert error is None


def test_db_connection_failure_is_reported(monkeypatch) -> None:
    monkeypatch.setattr(db_module, "get_engine", lambda: _BrokenEngine())
    ok, error = db_module.test_connection()
    assert ok is False
    assert error == "connection refused"


def test_in_memory_sqlite_shares_one_connection() -> None:
    memory_options = db_module._engine_options("sqlite+pysqlite://")
    file_options = db_module._engine_options("sqlite:///./data/mux_sync.sqlite")
    postgres_options = db_module._engine_options("postgresql+psycopg2://app:password@db:5432/mux_sync")

    assert memory_options["poolclass"] is StaticPool
    assert "poolclass" not in file_options
    assert file_options["connect_args"] == {"check_same_thread": False}
    assert "connect_args" not in postgres_options


def test_session_scope_rolls_back_on_error(monkeypatch) -> None:
    events = []

    class _RecordingSession:
        def rollback(self):
            events.append("rollback")

        def close(self):
            events.append("close")

    monkeypatch.setattr(db_module, "get_session_factory", lambda: _RecordingSession)

    with pytest.raises(RuntimeError):
        with db_module.session_scope():
            raise RuntimeError("boom")

    assert events == ["rollback", "close"]
