"""Tests for the Typer CLI."""

import json

from typer.testing import CliRunner

import cli
from eligibility_service.config import Settings


runner = CliRunner()


def test_show_catalog_lists_codes_in_order():
    result = runner.invoke(cli.app, ["show-catalog"])

    assert result.exit_code == 0
    lines = result.stdout.strip().splitlines()
    assert lines[0].startswith("D0120\tPreventive\tPreventative Coverage")
    assert lines[-1].endswith("procedures")


def test_fallback_preview_respects_limit():
    result = runner.invoke(cli.app, ["fallback-preview", "--limit", "3"])

    assert result.exit_code == 0
    report = json.loads(result.stdout)
    assert report["synthetic"] is True
    assert len(report["procedures"]) == 3


def test_missing_catalog_file_exits_nonzero(tmp_path):
    result = runner.invoke(cli.app, ["show-catalog", "--catalog-path", str(tmp_path / "missing.json")])

    assert result.exit_code == 1


def test_check_benefits_in_mock_mode(monkeypatch):
    monkeypatch.setattr(cli, "settings", Settings(_env_file=None, eligibility_api_enabled=False))

    result = runner.invoke(
        cli.app,
        [
            "check-benefits",
            "--member-id", "0000000000",
            "--first-name", "John",
            "--last-name", "Doe",
            "--dob", "1987-05-21",
            "--npi", "1234567890",
        ],
    )

    assert result.exit_code == 0
    output = json.loads(result.stdout)
    assert output["data"]["fallbackReason"] == "api_disabled"
    assert output["note"]


def test_check_benefits_without_api_key_exits_nonzero(monkeypatch):
    monkeypatch.setattr(cli, "settings", Settings(_env_file=None, stedi_api_key=""))

    result = runner.invoke(
        cli.app,
        [
            "check-benefits",
            "--member-id", "1",
            "--first-name", "A",
            "--last-name", "B",
            "--dob", "2000-01-01",
            "--npi", "1234567890",
        ],
    )

    assert result.exit_code == 1
