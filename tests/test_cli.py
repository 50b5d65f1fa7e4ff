"""Tests for the Typer CLI."""

from __future__ import annotations

import json
import logging

from fastapi.testclient import TestClient
from typer.testing import CliRunner

import transcript_search.main as main_module
from transcript_search.errors import ConfigError
from transcript_search.logging_utils import ROOT_LOGGER_NAME
from transcript_search.main import app
from transcript_search.server import create_app
from transcript_search.service import TranscriptSearchService

from .conftest import FakeEmbedder, FakeStore, build_database, make_row


runner = CliRunner()


def _install_service(monkeypatch, store: FakeStore, embedder: FakeEmbedder | None = None):
    service = TranscriptSearchService(store, embedder or FakeEmbedder())
    monkeypatch.setattr(main_module, "_build_service", lambda: service)
    return service


def test_search_renders_table(monkeypatch) -> None:
    rows = [make_row(0.91, episode_title="Episode 7", segment_text="Borrowing")]
    _install_service(monkeypatch, FakeStore(responses=[rows]))

    result = runner.invoke(app, ["search", "borrow checker", "--limit", "3"])

    assert result.exit_code == 0, result.output
    assert "Episode 7" in result.output
    assert "0.910" in result.output


def test_search_json_prints_tool_payload(monkeypatch) -> None:
    rows = [make_row(0.8, id=1), make_row(0.7, id=2)]
    _install_service(monkeypatch, FakeStore(responses=[rows]))

    result = runner.invoke(
        app, ["search", "typing", "--json", "-m", "0.75", "--log-level", "WARNING"]
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert [item["similarity"] for item in payload] == [0.8]


def test_search_without_matches_prints_message(monkeypatch) -> None:
    _install_service(monkeypatch, FakeStore(responses=[[]]))

    result = runner.invoke(app, ["search", "nothing relevant"])

    assert result.exit_code == 0
    assert "No matching transcript segments found." in result.output


def test_search_warns_when_degraded(monkeypatch) -> None:
    rows = [make_row(0.95, id=i) for i in range(1, 3)]
    _install_service(monkeypatch, FakeStore(embedding_count=0, responses=[rows]))

    result = runner.invoke(app, ["search", "anything"])

    assert result.exit_code == 0
    assert "Degraded mode" in result.output


def test_search_invalid_limit_exits_with_error(monkeypatch) -> None:
    _install_service(monkeypatch, FakeStore())

    result = runner.invoke(app, ["search", "q", "--limit", "51"])

    assert result.exit_code == 1
    assert "invalid_params" in result.output


def test_search_provider_failure_exits_with_error(monkeypatch) -> None:
    _install_service(monkeypatch, FakeStore(), FakeEmbedder(fail=True))

    result = runner.invoke(app, ["search", "q"])

    assert result.exit_code == 1
    assert "internal_error" in result.output


def test_search_missing_config_exits_with_error(monkeypatch) -> None:
    def _fail() -> TranscriptSearchService:
        raise ConfigError("Missing required environment variables: VOYAGE_API_KEY")

    monkeypatch.setattr(main_module, "_build_service", _fail)

    result = runner.invoke(app, ["search", "q"])

    assert result.exit_code == 1
    assert "VOYAGE_API_KEY" in result.output


def test_serve_requires_configuration(monkeypatch) -> None:
    monkeypatch.delenv("TRANSCRIPT_SEARCH_DB_URL", raising=False)
    monkeypatch.delenv("VOYAGE_API_KEY", raising=False)
    calls: list[dict] = []
    monkeypatch.setattr(main_module, "run_server", lambda **kwargs: calls.append(kwargs))

    result = runner.invoke(app, ["serve"])

    assert result.exit_code == 1
    assert calls == []
    assert "TRANSCRIPT_SEARCH_DB_URL" in result.output


def test_serve_starts_server(monkeypatch, tmp_path) -> None:
    calls: list[dict] = []
    monkeypatch.setenv("TRANSCRIPT_SEARCH_DB_URL", str(tmp_path / "index.duckdb"))
    monkeypatch.setenv("VOYAGE_API_KEY", "vk-test")
    monkeypatch.setattr(main_module, "run_server", lambda **kwargs: calls.append(kwargs))

    result = runner.invoke(app, ["serve", "--host", "0.0.0.0", "-p", "9001"])

    assert result.exit_code == 0, result.output
    assert calls == [{"host": "0.0.0.0", "port": 9001}]


def test_serve_log_level_holds_through_app_startup(monkeypatch, tmp_path) -> None:
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    previous_level = logger.level
    levels: list[int] = []

    def _start_app(**kwargs) -> None:
        # the lifespan builds the service from the environment
        with TestClient(create_app()) as client:
            assert client.get("/api/health").status_code == 200
            levels.append(logger.level)

    db_path = build_database(tmp_path / "index.duckdb", encoding="json_array")
    monkeypatch.setenv("TRANSCRIPT_SEARCH_DB_URL", db_path)
    monkeypatch.setenv("VOYAGE_API_KEY", "vk-test")
    monkeypatch.delenv("TRANSCRIPT_SEARCH_LOG_LEVEL", raising=False)
    monkeypatch.setattr(main_module, "run_server", _start_app)

    try:
        result = runner.invoke(app, ["serve", "--log-level", "DEBUG"])
    finally:
        logger.setLevel(previous_level)

    assert result.exit_code == 0, result.output
    assert levels == [logging.DEBUG]
