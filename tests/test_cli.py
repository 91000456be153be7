"""Tests for the main.py command line: register and feed against a temp SQLite file."""

from __future__ import annotations

import json

import pytest

import main as cli
from core.config import Settings


@pytest.fixture
def settings(tmp_path, monkeypatch):
    s = Settings(secret_key="c" * 32, database_url=f"sqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setattr(cli, "get_settings", lambda: s)
    return s


def _answer_getpass(monkeypatch, *answers):
    replies = iter(answers)
    monkeypatch.setattr(cli.getpass, "getpass", lambda prompt="": next(replies))


def test_register_creates_user(settings, monkeypatch, capsys):
    _answer_getpass(monkeypatch, "Abcdef1!", "Abcdef1!")
    assert cli.main(["register", "cli_user"]) == 0
    assert "Registered cli_user" in capsys.readouterr().out


def test_register_mismatched_passwords(settings, monkeypatch, capsys):
    _answer_getpass(monkeypatch, "Abcdef1!", "Abcdef1?")
    assert cli.main(["register", "cli_user"]) == 1
    assert "do not match" in capsys.readouterr().out


def test_register_reports_rule_violation(settings, monkeypatch, capsys):
    _answer_getpass(monkeypatch, "weak", "weak")
    assert cli.main(["register", "cli_user"]) == 1
    assert "Password must be between" in capsys.readouterr().out


def test_feed_empty(settings, capsys):
    assert cli.main(["feed"]) == 0
    assert "No ads on page 1 (0 total)" in capsys.readouterr().out


def test_feed_json(settings, capsys):
    from ads.service import AdService
    from ads.store import AdStore

    store = AdStore(settings.database_url)
    service = AdService(store)
    for price in (5, 15, 25):
        service.create_ad("user-1", f"Item {price}", "", "", price)
    store.close()

    assert cli.main(["feed", "--json", "--sort-by", "price", "--sort-order", "asc", "--min-price", "10"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["total_count"] == 2
    assert [a["price"] for a in data["ads"]] == [15, 25]
    assert data["page"] == 1
    assert data["limit"] == 10


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 0
    assert "usage: adboard" in capsys.readouterr().out
