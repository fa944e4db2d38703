from __future__ import annotations

import pytest
from pydantic import ValidationError

from courier.config import Settings, get_settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("COURIER_MAX_STEPS", "COURIER_LOG_LEVEL", "COURIER_LOG_PROFILE", "COURIER_TRACE"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings()

    assert settings.max_steps is None
    assert settings.log_level == "INFO"
    assert settings.log_profile == "default"
    assert settings.trace is False


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COURIER_MAX_STEPS", "100")
    monkeypatch.setenv("COURIER_LOG_PROFILE", "console")
    monkeypatch.setenv("courier_trace", "true")

    settings = get_settings()

    assert settings.max_steps == 100
    assert settings.log_profile == "console"
    assert settings.trace is True


def test_explicit_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COURIER_MAX_STEPS", "100")

    assert get_settings(max_steps=5).max_steps == 5


def test_max_steps_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        Settings(max_steps=0)
