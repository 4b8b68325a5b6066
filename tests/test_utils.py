"""Unit tests for stock_analyst/utils (config, logging, tracing)"""
from __future__ import annotations
import asyncio
import logging
from unittest.mock import MagicMock, patch
import pytest


_ENV_KEYS = [
    "OPENAI_API_KEY", "OPENAI_MODEL", "TIINGO_API_KEY", "SERPER_API_KEY", "TAVILY_API_KEY",
    "PINECONE_API_KEY", "PINECONE_INDEX", "DISCORD_WEBHOOK_URL", "REPORT_DB_PATH",
    "MARKET_DATA_PROVIDER", "VECTOR_BACKEND",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    # keep a developer's real .env out of the tests
    monkeypatch.setattr("stock_analyst.utils.config.load_dotenv", lambda *a, **k: False)
    return monkeypatch


class TestSettings:

    def test_defaults(self):
        from stock_analyst.utils.config import Settings
        s = Settings()
        assert s.max_iterations == 5
        assert s.archive_top_k == 5
        assert s.lookback_days == 30
        assert s.discord_max_length == 2000
        assert s.vector_backend == "local"
        assert s.openai_api_key is None

    def test_temperature_for_known_and_unknown_roles(self):
        from stock_analyst.utils.config import Settings
        s = Settings()
        assert s.temperature_for("news_analyst") == 0.3
        assert s.temperature_for("writer") == 0.4
        assert s.temperature_for("unknown_role") == 0.1

    def test_max_iterations_must_be_positive(self):
        from stock_analyst.utils.config import Settings
        with pytest.raises(ValueError):
            Settings(max_iterations=0)


class TestLoadSettings:

    def test_reads_yaml(self, tmp_path, clean_env):
        from stock_analyst.utils.config import load_settings
        cfg = tmp_path / "config.yaml"
        cfg.write_text("max_iterations: 3\nmarket_data_provider: tiingo\n")
        s = load_settings(cfg)
        assert s.max_iterations == 3
        assert s.market_data_provider == "tiingo"

    def test_missing_yaml_uses_defaults(self, tmp_path, clean_env):
        from stock_analyst.utils.config import load_settings
        s = load_settings(tmp_path / "absent.yaml")
        assert s.max_iterations == 5

    def test_environment_overrides_yaml(self, tmp_path, clean_env):
        from stock_analyst.utils.config import load_settings
        cfg = tmp_path / "config.yaml"
        cfg.write_text("vector_backend: local\nmodel: gpt-4.1-mini\n")
        clean_env.setenv("VECTOR_BACKEND", "pinecone")
        clean_env.setenv("OPENAI_MODEL", "gpt-4.1")
        clean_env.setenv("SERPER_API_KEY", "serper-key")
        s = load_settings(cfg)
        assert s.vector_backend == "pinecone"
        assert s.model == "gpt-4.1"
        assert s.serper_api_key == "serper-key"

    def test_blank_environment_value_ignored(self, tmp_path, clean_env):
        from stock_analyst.utils.config import load_settings
        clean_env.setenv("OPENAI_API_KEY", "   ")
        s = load_settings(tmp_path / "absent.yaml")
        assert s.openai_api_key is None


class TestLogging:

    def test_get_logger_single_handler(self, monkeypatch):
        from stock_analyst.utils.logging import get_logger
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        a = get_logger("stock_analyst.test_logger")
        b = get_logger("stock_analyst.test_logger")
        assert a is b
        assert len(a.handlers) == 1
        assert a.propagate is False
        assert a.level == logging.INFO

    @pytest.mark.parametrize("value,expected", [
        (logging.DEBUG, logging.DEBUG),
        ("warning", logging.WARNING),
        ("nonsense", logging.INFO),
    ])
    def test_resolve_level(self, value, expected):
        from stock_analyst.utils.logging import resolve_level
        assert resolve_level(value) == expected

    def test_level_from_environment(self, monkeypatch):
        from stock_analyst.utils.logging import get_logger
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        assert get_logger("stock_analyst.test_env_logger").level == logging.ERROR

    def test_set_log_level_reaches_package_loggers_only(self, monkeypatch):
        from stock_analyst.utils.logging import get_logger, set_log_level
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        ours = get_logger("stock_analyst.test_verbose")
        worker = logging.getLogger("worker.test_verbose")
        other = logging.getLogger("thirdparty.test_verbose")
        other.setLevel(logging.WARNING)
        set_log_level(logging.DEBUG)
        assert ours.level == logging.DEBUG
        assert worker.level == logging.DEBUG
        assert other.level == logging.WARNING
        set_log_level(logging.INFO)


class TestTracing:

    def test_traceable_is_noop_without_config(self, monkeypatch):
        monkeypatch.delenv("LANGCHAIN_TRACING_V2", raising=False)
        monkeypatch.delenv("LANGCHAIN_API_KEY", raising=False)
        from stock_analyst.utils.tracing import traceable

        async def work(x):
            return x * 2

        wrapped = traceable(name="work")(work)
        assert wrapped is work
        assert asyncio.run(wrapped(21)) == 42

    def test_dotenv_switches_apply_to_later_decorations(self, monkeypatch):
        import importlib
        import stock_analyst.utils.tracing as tracing

        for name in ("LANGCHAIN_TRACING_V2", "LANGCHAIN_API_KEY"):
            monkeypatch.setenv(name, "")
            monkeypatch.delenv(name)

        def fake_load_dotenv(*args, **kwargs):
            # what a .env holding only the tracing switches would do
            monkeypatch.setenv("LANGCHAIN_TRACING_V2", "true")
            monkeypatch.setenv("LANGCHAIN_API_KEY", "ls__test")
            return True

        async def work(x):
            return x

        try:
            with patch("dotenv.load_dotenv", side_effect=fake_load_dotenv) as mock_load:
                importlib.reload(tracing)
            mock_load.assert_called_once()
            assert tracing.tracing_enabled() is True
            assert tracing.traceable(name="work")(work) is not work
        finally:
            monkeypatch.undo()
            with patch("dotenv.load_dotenv", return_value=False):
                importlib.reload(tracing)

    def test_log_run_without_client_does_nothing(self):
        with patch("stock_analyst.utils.tracing.get_langsmith_client", return_value=None):
            from stock_analyst.utils.tracing import log_run
            assert log_run("run", {"a": 1}, {"b": 2}) is None

    def test_log_run_uses_client(self, monkeypatch):
        from datetime import datetime, timezone
        monkeypatch.delenv("LANGCHAIN_PROJECT", raising=False)
        client = MagicMock()
        started = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
        with patch("stock_analyst.utils.tracing.get_langsmith_client", return_value=client):
            from stock_analyst.utils.tracing import log_run
            log_run("stock_report_run", {"ticker": "AAPL"}, {"status": "success"},
                    tags=["pipeline"], start_time=started)
        kwargs = client.create_run.call_args.kwargs
        assert kwargs["outputs"] == {"status": "success"}
        assert kwargs["start_time"] == started
        assert kwargs["end_time"] >= started
        assert kwargs["tags"] == ["stock-analyst", "pipeline"]
        assert kwargs["project_name"] == "stock-analyst"

    def test_log_run_swallows_client_errors(self):
        client = MagicMock()
        client.create_run.side_effect = RuntimeError("langsmith down")
        with patch("stock_analyst.utils.tracing.get_langsmith_client", return_value=client):
            from stock_analyst.utils.tracing import log_run
            assert log_run("stock_report_run", {}, {}) is None

    def test_project_from_environment(self, monkeypatch):
        from stock_analyst.utils.tracing import tracing_project
        monkeypatch.setenv("LANGCHAIN_PROJECT", "desk-staging")
        assert tracing_project() == "desk-staging"
        monkeypatch.setenv("LANGCHAIN_PROJECT", "  ")
        assert tracing_project() == "stock-analyst"

    def test_tracing_enabled_needs_flag_and_key(self, monkeypatch):
        from stock_analyst.utils.tracing import tracing_enabled
        monkeypatch.setenv("LANGCHAIN_TRACING_V2", "true")
        monkeypatch.delenv("LANGCHAIN_API_KEY", raising=False)
        assert tracing_enabled() is False
        monkeypatch.setenv("LANGCHAIN_API_KEY", "ls__test")
        assert tracing_enabled() is True
