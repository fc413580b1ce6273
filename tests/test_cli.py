"""Tests for the command-line interface."""

import pytest
from typer.testing import CliRunner

from slug_translations import cli as cli_module
from slug_translations import config as config_module
from slug_translations.cli import app
from slug_translations.service import SlugService
from slug_translations.stores.memory import MemoryTranslationStore

runner = CliRunner()


@pytest.fixture
def invoke(monkeypatch, tmp_path):
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_PATHS", ())
    monkeypatch.delenv("SLUGS_STORE_BACKEND", raising=False)
    store_options = ["--backend", "files", "--store-path", str(tmp_path / "records")]

    def _invoke(*args):
        return runner.invoke(app, [*store_options, *args])

    return _invoke


def test_create_and_find(invoke):
    created = invoke("create", "A title")
    assert created.exit_code == 0, created.output
    assert "a-title" in created.output

    translated = invoke("translate", "1", "Titel", "--locale", "de")
    assert translated.exit_code == 0, translated.output
    assert "de: titel" in translated.output

    found = invoke("find", "titel", "--locale", "de")
    assert found.exit_code == 0, found.output
    assert "a-title" in found.output
    assert "titel" in found.output


def test_collisions_are_sequenced(invoke):
    invoke("create", "A title")
    second = invoke("create", "A title")

    assert "a-title--2" in second.output
    assert invoke("next-slug", "a title").output.strip() == "a-title--3"
    assert invoke("next-slug", "a title", "--exclude", "2").output.strip() == "a-title--2"


def test_set_slug(invoke):
    invoke("create", "War and Peace")
    result = invoke("set-slug", "1", "Guerra y paz", "--locale", "es")

    assert result.exit_code == 0, result.output
    assert "es: guerra-y-paz" in result.output


def test_missing_record_fails(invoke):
    result = invoke("find", "nothing")

    assert result.exit_code == 1
    assert "No record found" in result.output


def test_delete(invoke):
    invoke("create", "A title")

    assert invoke("delete", "1").exit_code == 0
    assert invoke("find", "a-title").exit_code == 1


def test_unsluggable_title_is_bad_parameter(invoke):
    result = invoke("create", "!!!")

    assert result.exit_code == 2


def test_store_is_closed_after_command(invoke, monkeypatch):
    closed = []

    class ClosingStore(MemoryTranslationStore):
        def close(self):
            closed.append(True)

    def _create_service(config):
        return SlugService(ClosingStore(), locales=config.locales.context())

    monkeypatch.setattr(cli_module, "create_service", _create_service)

    assert invoke("next-slug", "a title").exit_code == 0
    assert invoke("find", "missing").exit_code == 1
    assert closed == [True, True]
