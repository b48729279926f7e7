"""Tests for main.py -- the add-app provisioning command."""

from __future__ import annotations

from unittest.mock import patch

from main import build_parser, main
from storage.errors import AppExistsError


def test_add_app_prints_new_id(capsys):
    code = main(["add-app", "--name", "billing", "--secret", "s" * 32])

    assert code == 0
    assert "App 'billing' registered with id 1" in capsys.readouterr().out


def test_add_app_rejects_short_secret(capsys):
    code = main(["add-app", "--name", "billing", "--secret", "short"])

    assert code == 2
    assert "at least 32 characters" in capsys.readouterr().err


def test_add_app_reports_storage_errors(capsys):
    with patch("storage.sqlite.Storage.save_app", side_effect=AppExistsError("app 'billing' already exists")):
        code = main(["add-app", "--name", "billing", "--secret", "s" * 32])

    assert code == 1
    assert "already exists" in capsys.readouterr().err


def test_serve_accepts_host_and_port():
    args = build_parser().parse_args(["serve", "--host", "127.0.0.1", "--port", "8080"])

    assert args.host == "127.0.0.1"
    assert args.port == 8080
