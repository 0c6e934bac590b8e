#!/usr/bin/env python3
"""
Tests for the CLI, settings and logging setup
"""
import logging
import sys

import pytest

import main
from config import Settings, get_settings
from logger_config import setup_logging


@pytest.fixture
def cli(monkeypatch, tmp_path):
    monkeypatch.setenv("STACK_STACKS_FILE", str(tmp_path / "stacks.json"))
    get_settings.cache_clear()

    def run(*args):
        monkeypatch.setattr(sys, "argv", ["main.py", *args])
        main.main()

    yield run
    get_settings.cache_clear()


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("STACK_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("STACK_MAX_RETRIES", "5")
    settings = Settings()
    assert settings.log_level == "DEBUG"
    assert settings.max_retries == 5
    assert settings.stacks_file == "saved_stacks.json"


def test_setup_logging_installs_one_handler():
    root = setup_logging("debug")
    count = len(root.handlers)
    setup_logging(logging.INFO)
    assert len(root.handlers) == count
    assert root.level == logging.INFO


def test_cli_prints_report(cli, capsys):
    cli("nac", "glycine", "ghost")
    out = capsys.readouterr().out
    assert "GlyNAC Protocol" in out
    assert "Ignoring unknown item ids: ghost" in out
    assert "No warnings detected." in out


def test_cli_save_then_load(cli, capsys):
    cli("nac", "glycine", "--save", "Mine")
    out = capsys.readouterr().out
    stack_id = out.split("as ")[-1].strip()
    assert stack_id.startswith("custom-")

    cli("--list-stacks")
    assert "Mine (2 items)" in capsys.readouterr().out

    cli("--load", stack_id)
    assert "GlyNAC Protocol" in capsys.readouterr().out


def test_cli_unknown_stack_exits_1(cli, capsys):
    with pytest.raises(SystemExit) as exc:
        cli("--load", "custom-0")
    assert exc.value.code == 1
    assert "Error: Saved stack 'custom-0' not found." in capsys.readouterr().out


def test_cli_missing_catalog_exits_1(cli, capsys, tmp_path):
    with pytest.raises(SystemExit) as exc:
        cli("--catalog", str(tmp_path / "missing"), "nac")
    assert exc.value.code == 1
    assert "Error: Catalog directory not found" in capsys.readouterr().out


def test_cli_lists_items(cli, capsys):
    cli("--list-items", "--sort", "alpha")
    out = capsys.readouterr().out
    assert out.index("Prescription Medication") > out.index("Sleep")
    assert "creatine-monohydrate" in out


def test_cli_counts_severe_warnings(cli, capsys):
    cli("elvanse", "ritalin")
    assert "WARNINGS (3 severe)" in capsys.readouterr().out
