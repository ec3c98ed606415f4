"""Tests for the command-line interface."""

import pytest
from typer.testing import CliRunner

from conftest import FakeParser
from kalvian_roots.cli import main as cli
from kalvian_roots.config import Settings
from kalvian_roots.context import build_context

runner = CliRunner()


@pytest.fixture
def context(corpus, families, monkeypatch):
    context = build_context(
        Settings(cache_db_path=None, family_ids_path=None),
        locator=corpus,
        parser=FakeParser(families),
    )
    monkeypatch.setattr(cli, "build_context", lambda config: context)
    return context


def test_resolve(context):
    result = runner.invoke(cli.app, ["resolve", "KORPI 6"])

    assert result.exit_code == 0
    assert "KORPELA 2" in result.output
    assert "6 linked families resolved" in result.output


def test_resolve_unknown_family(context):
    result = runner.invoke(cli.app, ["resolve", "NOWHERE 1"])
    assert result.exit_code == 1


def test_cite_family(context):
    result = runner.invoke(cli.app, ["cite", "KORPI 6"])

    assert result.exit_code == 0
    assert "Information on pages 105, 106 includes:" in result.output
    assert "[14.10.1773]" in result.output


def test_cite_spouse(context):
    result = runner.invoke(cli.app, ["cite", "KORPI 6", "--person", "Juho Juhonp."])

    assert result.exit_code == 0
    assert "Information on page 301 includes:" in result.output


def test_cite_unknown_person(context):
    result = runner.invoke(cli.app, ["cite", "KORPI 6", "--person", "Kustaa"])
    assert result.exit_code == 1


def test_prefetch(context):
    result = runner.invoke(cli.app, ["prefetch", "KORPI 7", "--limit", "5"])

    assert result.exit_code == 0
    assert context.cache.cached_family_ids() == ["KORVELA 3", "RITA 9"]


def test_clans():
    result = runner.invoke(cli.app, ["clans", "--clan", "korvela"])

    assert result.exit_code == 0
    assert "KORVELA" in result.output
    assert "HANNILA" not in result.output


def test_names():
    result = runner.invoke(cli.app, ["names", "Juho", "Johan"])

    assert result.exit_code == 0
    assert "yes" in result.output
    assert "male" in result.output


def test_hiski_search(context):
    result = runner.invoke(cli.app, ["hiski", "KORPI 6", "--person", "Erik", "--event", "marriage"])

    assert result.exit_code == 0
    assert "Marriage record for Erik and Maria Antint. on 78" in result.output
    assert "kirja=vihityt" in result.output
    assert "alkuvuosi=1778" in result.output


def test_hiski_lookup(context, monkeypatch):
    pages = [
        '<LI>Years 18.5.1751 - 18.5.1751\n'
        '<a href="/hiski?en+0053+kastetut+2001"><img src="/historia/sl.gif"></a> 18.5.1751',
        '<A HREF="/hiski?en+t512345">Link to this event</A>',
    ]

    async def fetch_text(url):
        return pages.pop(0)

    monkeypatch.setattr(context.hiski, "_fetch_text", fetch_text)
    result = runner.invoke(cli.app, ["hiski", "KORPI 6", "--person", "Magdalena", "--lookup"])

    assert result.exit_code == 0
    assert "Record 512345:" in result.output
    assert "https://hiski.genealogia.fi/hiski?en+t512345" in result.output


def test_hiski_without_event_date(context):
    result = runner.invoke(cli.app, ["hiski", "KORPI 6", "--person", "Anna", "--event", "death"])
    assert result.exit_code == 1
