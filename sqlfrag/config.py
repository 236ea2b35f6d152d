"""Configuration for statement sessions.

Settings can be given explicitly or read from the environment:

- SQLFRAG_DIALECT: Dialect name (string, default ``postgres``)
- SQLFRAG_STORE_ENGINE: Storage engine for CREATE TABLE (string)
- SQLFRAG_CHARSET: Default character set for CREATE TABLE (string)
- SQLFRAG_USE_CASCADE: Cascade loading of references (true/false)
- SQLFRAG_AUTO_RESET: Reset the statement after each rendered query (true/false)
"""

import os
from dataclasses import dataclass

from sqlfrag.dialects import is_registered_dialect

__all__ = (
    "StatementConfig",
    "create_default_config",
    "load_config_from_env",
)


@dataclass(frozen=True)
class StatementConfig:
    """Defaults applied to every statement of a session."""

    dialect: str = "postgres"
    store_engine: str = ""
    charset: str = ""
    use_cascade: bool = True
    auto_reset: bool = True

    def validate(self) -> "list[str]":
        """Return configuration problems, empty when valid."""
        errors: list[str] = []
        if not is_registered_dialect(self.dialect):
            errors.append(f"Unknown dialect: {self.dialect}")
        if self.store_engine and not self.store_engine.replace("_", "").isalnum():
            errors.append(f"Invalid storage engine name: {self.store_engine!r}")
        if self.charset and not self.charset.replace("_", "").isalnum():
            errors.append(f"Invalid charset name: {self.charset!r}")
        return errors


def create_default_config() -> StatementConfig:
    return StatementConfig()


def load_config_from_env() -> StatementConfig:
    """Load configuration from ``SQLFRAG_*`` environment variables."""
    return StatementConfig(
        dialect=os.getenv("SQLFRAG_DIALECT", "postgres"),
        store_engine=os.getenv("SQLFRAG_STORE_ENGINE", ""),
        charset=os.getenv("SQLFRAG_CHARSET", ""),
        use_cascade=_env_bool("SQLFRAG_USE_CASCADE", True),
        auto_reset=_env_bool("SQLFRAG_AUTO_RESET", True),
    )


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on", "enabled")
