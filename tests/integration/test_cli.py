"""Integration tests for CLI commands."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from kakuyomu_dl import cli
from kakuyomu_dl.cli import app
from kakuyomu_dl.config.manager import ConfigManager
from kakuyomu_dl.pipeline import DownloadOptions, DownloadResult
from kakuyomu_dl.utils.errors import DiscoveryError, FetchError

runner = CliRunner()


class FakeOrchestrator:
    """Stands in for DownloadOrchestrator and records what it was asked to do."""

    instances: list["FakeOrchestrator"] = []
    error: Exception | None = None

    def __init__(self, config) -> None:
        self.config = config
        self.runs: list[DownloadOptions] = []
        self.batches: list[dict] = []
        FakeOrchestrator.instances.append(self)

    async def run(self, options, progress_callback=None):
        if FakeOrchestrator.error:
            raise FakeOrchestrator.error
        self.runs.append(options)
        progress_callback("discovery_start", {"url": options.url})
        progress_callback("discovery_complete", {"episode_count": 1})
        progress_callback("episode_complete", {"index": 1, "total": 1, "title": "一話"})
        progress_callback("save_complete", {"path": str(options.output_path), "chars": 42})
        return DownloadResult(
            url=options.url,
            output_path=options.output_path,
            episode_count=1,
            char_count=42,
            saved=not options.dry_run,
        )

    async def run_batch(self, entries, save_dir, dry_run=False, since=None, progress_callback=None):
        if FakeOrchestrator.error:
            raise FakeOrchestrator.error
        self.batches.append(
            {"entries": entries, "save_dir": save_dir, "dry_run": dry_run, "since": since}
        )
        return []


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path: Path):
    """Point the CLI at a temporary config dir and a fake orchestrator."""
    FakeOrchestrator.instances = []
    FakeOrchestrator.error = None
    monkeypatch.setattr(cli, "ConfigManager", lambda: ConfigManager(config_dir=tmp_path / "config"))
    monkeypatch.setattr(cli, "DownloadOrchestrator", FakeOrchestrator)


class TestCLIVersion:
    """Tests for version command."""

    def test_version_command(self) -> None:
        """Test version command displays version."""
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "kakuyomu-dl" in result.stdout
        assert "0.1.0" in result.stdout


class TestCLIDownload:
    """Tests for download command."""

    def test_download_success(self, tmp_path: Path, toc_url: str) -> None:
        """Test a download runs the orchestrator with the given options."""
        output = tmp_path / "novel.txt"
        result = runner.invoke(app, ["download", toc_url, "-o", str(output), "-u", "24-05-01"])

        assert result.exit_code == 0, result.stdout
        options = FakeOrchestrator.instances[0].runs[0]
        assert options.url == toc_url
        assert options.output_path == output
        assert options.since.isoformat() == "2024-05-01"
        assert options.dry_run is False
        assert "Complete" in result.stdout

    def test_download_default_output_in_savedir(self, tmp_path: Path, toc_url: str) -> None:
        """Test the output defaults to <savedir>/output.txt."""
        result = runner.invoke(app, ["download", toc_url, "--savedir", str(tmp_path), "--dry-run"])

        assert result.exit_code == 0, result.stdout
        options = FakeOrchestrator.instances[0].runs[0]
        assert options.output_path == tmp_path / "output.txt"
        assert options.dry_run is True

    def test_download_dry_run_writes_no_config(self, tmp_path: Path, toc_url: str) -> None:
        """Test a dry run leaves a missing config file uncreated."""
        result = runner.invoke(app, ["download", toc_url, "--dry-run"])

        assert result.exit_code == 0, result.stdout
        assert not (tmp_path / "config" / "config.yaml").exists()

    def test_download_creates_default_config(self, tmp_path: Path, toc_url: str) -> None:
        """Test a real run writes the default config on first use."""
        result = runner.invoke(app, ["download", toc_url, "-o", str(tmp_path / "novel.txt")])

        assert result.exit_code == 0, result.stdout
        assert (tmp_path / "config" / "config.yaml").exists()

    def test_download_rejects_foreign_url(self) -> None:
        """Test URLs outside kakuyomu.jp/works are rejected."""
        result = runner.invoke(app, ["download", "https://example.com/works/1"])

        assert result.exit_code == 1
        assert "URL must start with" in result.stdout
        assert FakeOrchestrator.instances == []

    def test_download_invalid_update_date(self, toc_url: str) -> None:
        """Test a malformed --update value is a usage error."""
        result = runner.invoke(app, ["download", toc_url, "--update", "yesterday"])

        assert result.exit_code == 2

    def test_download_discovery_failure(self, toc_url: str) -> None:
        """Test discovery failures exit with status 1."""
        FakeOrchestrator.error = DiscoveryError(f"No episode URLs could be resolved from {toc_url}")

        result = runner.invoke(app, ["download", toc_url])

        assert result.exit_code == 1
        assert "Could not resolve episodes" in result.stdout

    def test_download_fetch_failure(self, toc_url: str) -> None:
        """Test fetch failures exit with status 1 and show the status code."""
        FakeOrchestrator.error = FetchError(503, f"{toc_url}/episodes/1")

        result = runner.invoke(app, ["download", toc_url])

        assert result.exit_code == 1
        assert "HTTP 503" in result.stdout


class TestCLIBatch:
    """Tests for batch command."""

    def test_batch_runs_list_entries(self, tmp_path: Path) -> None:
        """Test list entries are handed to the orchestrator."""
        list_file = tmp_path / "novels.lst"
        list_file.write_text(
            "title = 一\nfile_name = one\nurl = https://kakuyomu.jp/works/1\n\n"
            "title = 二\nfile_name = two\nurl = https://kakuyomu.jp/works/2\n",
            encoding="utf-8",
        )

        result = runner.invoke(app, ["batch", str(list_file), "-s", str(tmp_path / "out"), "-n"])

        assert result.exit_code == 0, result.stdout
        batch = FakeOrchestrator.instances[0].batches[0]
        assert [entry.file_name for entry in batch["entries"]] == ["one", "two"]
        assert batch["save_dir"] == tmp_path / "out"
        assert batch["dry_run"] is True
        assert batch["since"] is None

    def test_batch_empty_list(self, tmp_path: Path) -> None:
        """Test an empty list file does nothing."""
        list_file = tmp_path / "empty.lst"
        list_file.write_text("", encoding="utf-8")

        result = runner.invoke(app, ["batch", str(list_file)])

        assert result.exit_code == 0
        assert "No entries" in result.stdout
        assert FakeOrchestrator.instances == []

    def test_batch_missing_list_file(self, tmp_path: Path) -> None:
        """Test a missing list file exits with status 1."""
        result = runner.invoke(app, ["batch", str(tmp_path / "missing.lst")])

        assert result.exit_code == 1
        assert "Cannot read list file" in result.stdout


class TestCLIConfig:
    """Tests for config commands."""

    def test_config_show(self) -> None:
        """Test showing the configuration."""
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "browser.load_more_delay_ms" in result.stdout

    def test_config_set(self, tmp_path: Path) -> None:
        """Test setting a value persists it."""
        result = runner.invoke(app, ["config", "set", "browser.load_more_delay_ms", "900"])

        assert result.exit_code == 0
        config = ConfigManager(config_dir=tmp_path / "config").load_config()
        assert config.browser.load_more_delay_ms == 900

    def test_config_set_unknown_key(self) -> None:
        """Test unknown keys fail."""
        result = runner.invoke(app, ["config", "set", "nope", "1"])

        assert result.exit_code == 1
        assert "Unknown config key" in result.stdout
