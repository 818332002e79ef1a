import csv

import pytest
from typer.testing import CliRunner

from tenderharvest.cli.main import app
from tenderharvest.core import orchestrator
from tenderharvest.core.normalize import CSV_COLUMNS, TenderRecord
from tenderharvest.core.orchestrator import RunStats, SourceIntegrityError, SourceResult


runner = CliRunner()


@pytest.fixture
def fake_run(monkeypatch):
    """Replace the network harvest with canned results."""
    calls = []

    def run(configs, app_config, *, html_only=None, limit=None):
        calls.append({"ids": [c.id for c in configs], "html_only": html_only, "limit": limit})
        return [
            SourceResult(
                config=config,
                records=[TenderRecord(tender_number="SCM 12/2025", source=config.short_name)],
                stats=RunStats(source_id=config.id, pages_fetched=1, records_emitted=1),
            )
            for config in configs
        ]

    monkeypatch.setattr(orchestrator, "run_configured_sources", run)
    return calls


class TestMain:

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_invalid_app_config(self, cli_workspace):
        (cli_workspace / "configs" / "app.yaml").write_text("logging:\n  level: LOUD\n")
        result = runner.invoke(app, ["sources", "list"])
        assert result.exit_code == 1


class TestSourcesCommands:

    def test_list(self, cli_workspace):
        result = runner.invoke(app, ["sources", "list"])
        assert result.exit_code == 0
        assert "examplemun" in result.output
        assert "othermun" in result.output

    def test_show(self, cli_workspace):
        result = runner.invoke(app, ["sources", "show", "othermun"])
        assert result.exit_code == 0
        assert "othermun_tenders.csv" in result.output

    def test_show_unknown(self, cli_workspace):
        result = runner.invoke(app, ["sources", "show", "atlantis"])
        assert result.exit_code == 1

    def test_validate(self, cli_workspace):
        result = runner.invoke(app, ["sources", "validate"])
        assert result.exit_code == 0
        assert "2/2 valid" in result.output

    def test_validate_invalid_file(self, cli_workspace):
        bad = cli_workspace / "bad.yaml"
        bad.write_text("id: Bad Id\n", encoding="utf-8")
        result = runner.invoke(app, ["sources", "validate", str(bad)])
        assert result.exit_code == 1


class TestScrapeCommands:

    def test_run_requires_selection(self, cli_workspace):
        result = runner.invoke(app, ["scrape", "run"])
        assert result.exit_code == 1

    def test_run_rejects_both_selections(self, cli_workspace):
        result = runner.invoke(app, ["scrape", "run", "--all", "--source", "examplemun"])
        assert result.exit_code == 1

    def test_run_unknown_source(self, cli_workspace, fake_run):
        result = runner.invoke(app, ["scrape", "run", "--source", "atlantis"])
        assert result.exit_code == 1
        assert fake_run == []

    def test_run_writes_csv_per_source(self, cli_workspace, fake_run):
        result = runner.invoke(app, ["scrape", "run", "--all", "--html-only", "--limit", "5"])

        assert result.exit_code == 0
        assert fake_run == [{"ids": ["examplemun", "othermun"], "html_only": True, "limit": 5}]
        for name, source in (("examplemun", "Example"), ("othermun", "Other")):
            with open(cli_workspace / "output" / f"{name}_tenders.csv", newline="", encoding="utf-8") as f:
                rows = list(csv.DictReader(f))
            assert [row["Source"] for row in rows] == [source]

    def test_integrity_error_writes_nothing(self, cli_workspace, monkeypatch):
        def broken(configs, app_config, *, html_only=None, limit=None):
            raise SourceIntegrityError("othermun", "Other", ["Example"])

        monkeypatch.setattr(orchestrator, "run_configured_sources", broken)

        result = runner.invoke(app, ["scrape", "run", "--all"])

        assert result.exit_code == 2
        assert not list((cli_workspace / "output").glob("*.csv"))

    def test_merge_without_inputs(self, cli_workspace):
        result = runner.invoke(app, ["scrape", "merge"])

        assert result.exit_code == 0
        merged = cli_workspace / "output" / "all_municipal_tenders.csv"
        with open(merged, newline="", encoding="utf-8") as f:
            assert tuple(next(csv.reader(f))) == CSV_COLUMNS

    def test_merge_after_run(self, cli_workspace, fake_run):
        runner.invoke(app, ["scrape", "run", "--all"])
        result = runner.invoke(app, ["scrape", "merge"])

        assert result.exit_code == 0
        with open(cli_workspace / "output" / "all_municipal_tenders.csv", newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert [row["Source"] for row in rows] == ["Example", "Other"]
