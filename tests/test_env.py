# tests/test_env.py
from __future__ import annotations

import os
from pathlib import Path

import pytest

from remit.env import load_dotenv_if_present, reset_dotenv_state


@pytest.fixture(autouse=True)
def _fresh_dotenv_state():
    reset_dotenv_state()
    yield
    reset_dotenv_state()


def test_loads_dotenv_without_overriding(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    p = tmp_path / ".env"
    p.write_text("REMIT_TEST_FROM_DOTENV=yes\nREMIT_TEST_PRESET=from_file\n", encoding="utf-8")
    monkeypatch.delenv("REMIT_TEST_FROM_DOTENV", raising=False)
    monkeypatch.setenv("REMIT_TEST_PRESET", "from_env")
    monkeypatch.setenv("REMIT_DOTENV_PATH", str(p))

    assert load_dotenv_if_present() is True
    assert os.environ["REMIT_TEST_FROM_DOTENV"] == "yes"
    assert os.environ["REMIT_TEST_PRESET"] == "from_env"

    # Second call is a no-op.
    assert load_dotenv_if_present() is False
    monkeypatch.delenv("REMIT_TEST_FROM_DOTENV", raising=False)


def test_missing_file_is_not_an_error(tmp_path: Path) -> None:
    assert load_dotenv_if_present(str(tmp_path / "missing.env")) is False
