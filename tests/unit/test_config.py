"""Tests for sqlfrag.config module."""

import pytest

from sqlfrag.config import StatementConfig, create_default_config, load_config_from_env


def test_default_config() -> None:
    config = create_default_config()

    assert config == StatementConfig()
    assert config.dialect == "postgres"
    assert config.use_cascade is True
    assert config.auto_reset is True
    assert config.validate() == []


def test_load_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SQLFRAG_DIALECT", "mysql")
    monkeypatch.setenv("SQLFRAG_STORE_ENGINE", "InnoDB")
    monkeypatch.setenv("SQLFRAG_CHARSET", "utf8")
    monkeypatch.setenv("SQLFRAG_USE_CASCADE", "false")
    monkeypatch.setenv("SQLFRAG_AUTO_RESET", "0")

    config = load_config_from_env()

    assert config == StatementConfig(
        dialect="mysql", store_engine="InnoDB", charset="utf8", use_cascade=False, auto_reset=False
    )


def test_load_config_from_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("SQLFRAG_DIALECT", "SQLFRAG_STORE_ENGINE", "SQLFRAG_CHARSET", "SQLFRAG_USE_CASCADE", "SQLFRAG_AUTO_RESET"):
        monkeypatch.delenv(key, raising=False)

    assert load_config_from_env() == StatementConfig()


def test_validate_reports_every_problem() -> None:
    config = StatementConfig(dialect="nosuchdb", store_engine="InnoDB; DROP", charset="utf-8")

    errors = config.validate()

    assert len(errors) == 3
    assert errors[0] == "Unknown dialect: nosuchdb"


def test_validate_accepts_aliases() -> None:
    assert StatementConfig(dialect="postgresql").validate() == []
