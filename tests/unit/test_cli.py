"""
Unit tests for the Click-based CLI.

Downloads are mocked; these tests cover argument handling and output.
"""

import json
import time
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from chyoa_downloader import __version__
from chyoa_downloader.cli.commands import cli, download, version
from chyoa_downloader.client import ProbeResult
from chyoa_downloader.downloader import DownloadResult
from chyoa_downloader.models import LayoutMode
from chyoa_downloader.utils.exceptions import FetchError


URL = "https://chyoa.com/chapter/The-Start.12345"


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep session files and output out of the real home directory."""
    monkeypatch.setenv("CHYOA_SESSION_FILE", str(tmp_path / "session.json"))
    monkeypatch.setenv("CHYOA_OUTPUT_DIR", str(tmp_path / "stories"))
    monkeypatch.setenv("CHYOA_DELAY_MIN", "0")
    monkeypatch.setenv("CHYOA_DELAY_MAX", "0")


@pytest.fixture
def mock_downloader(tmp_path):
    """Patch the downloader so no browser or network is used."""
    with patch("chyoa_downloader.cli.commands.ChyoaDownloader") as mock_cls:
        mock_cls.return_value.download = AsyncMock(
            return_value=DownloadResult(output_dir=tmp_path / "stories" / "the_start")
        )
        yield mock_cls


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_help(self, runner):
        """Test that --help works."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "chyoa-download" in result.output
        assert "Previous Chapter" in result.output

    def test_cli_no_command(self, runner):
        """Test that running CLI with no command shows help."""
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "Commands:" in result.output

    def test_version_command(self, runner):
        """Test version command."""
        result = runner.invoke(version)
        assert result.exit_code == 0
        assert "chyoa-downloader" in result.output
        assert __version__ in result.output

    def test_download_help_lists_options(self, runner):
        result = runner.invoke(download, ["--help"])
        assert result.exit_code == 0
        for option in ("--single-file", "--json-file", "--embed-images", "--no-convert"):
            assert option in result.output


class TestDownloadCommand:
    """Test the download command."""

    def test_missing_url(self, runner):
        result = runner.invoke(cli, ["download"])
        assert result.exit_code == 2

    def test_invalid_url(self, runner, mock_downloader):
        """Test that a non-http value is rejected by the URL type."""
        result = runner.invoke(cli, ["download", "not-a-url"])
        assert result.exit_code == 2
        assert "not a valid URL" in result.output
        mock_downloader.assert_not_called()

    def test_non_chapter_url_warns(self, runner, mock_downloader):
        result = runner.invoke(cli, ["download", "https://chyoa.com/story/Some-Story.1", "-q"])
        assert result.exit_code == 0
        assert "does not look like" in result.output

    def test_conflicting_layout_flags(self, runner, mock_downloader):
        """Test that --single-file with --json-file fails before any download."""
        result = runner.invoke(cli, ["download", URL, "--single-file", "--json-file"])
        assert result.exit_code == 1
        assert "mutually exclusive" in result.output
        mock_downloader.assert_not_called()

    @pytest.mark.parametrize(
        ("flags", "layout"),
        [
            ([], LayoutMode.SEPARATE),
            (["--single-file"], LayoutMode.COMBINED),
            (["--json-file"], LayoutMode.JSON),
        ],
    )
    def test_layout_passed_to_downloader(self, runner, mock_downloader, flags, layout):
        result = runner.invoke(cli, ["download", URL, *flags])
        assert result.exit_code == 0, result.output
        args, kwargs = mock_downloader.call_args
        assert args[1] is layout
        mock_downloader.return_value.download.assert_awaited_once_with(URL)

    def test_flags_override_config(self, runner, mock_downloader, tmp_path):
        out = tmp_path / "elsewhere"
        result = runner.invoke(
            cli,
            ["download", URL, "--no-browser", "--no-convert", "--embed-images", "-o", str(out)],
        )
        assert result.exit_code == 0, result.output
        config = mock_downloader.call_args.args[0]
        assert config.use_browser is False
        assert config.convert_images is False
        assert config.embed_images is True
        assert config.output_dir == out

    def test_no_interactive(self, runner, mock_downloader):
        result = runner.invoke(cli, ["download", URL, "--no-interactive"])
        assert result.exit_code == 0
        assert mock_downloader.call_args.kwargs["interactive"] is False

    def test_cookie_passed_to_auth(self, runner, mock_downloader):
        result = runner.invoke(cli, ["download", URL, "-c", "laravel_session=abc"])
        assert result.exit_code == 0
        assert mock_downloader.call_args.kwargs["auth"].cookie == "laravel_session=abc"

    def test_summary_shown(self, runner, mock_downloader):
        result = runner.invoke(cli, ["download", URL])
        assert result.exit_code == 0
        assert "Download complete" in result.output

    def test_quiet_hides_summary(self, runner, mock_downloader):
        result = runner.invoke(cli, ["download", URL, "--quiet"])
        assert result.exit_code == 0
        assert "Download complete" not in result.output

    def test_fetch_error_exits_nonzero(self, runner, mock_downloader):
        mock_downloader.return_value.download = AsyncMock(
            side_effect=FetchError(f"Story not found (404): {URL}. Please check the URL.")
        )
        result = runner.invoke(cli, ["download", URL])
        assert result.exit_code == 1
        assert "Story not found" in result.output

    def test_invalid_environment_config(self, runner, mock_downloader, monkeypatch):
        monkeypatch.setenv("CHYOA_IMAGE_QUALITY", "500")
        result = runner.invoke(cli, ["download", URL])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        mock_downloader.assert_not_called()

    def test_log_file_written(self, runner, mock_downloader, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        result = runner.invoke(cli, ["download", URL, "--no-browser", "--log-file", str(log_file)])
        assert result.exit_code == 0
        assert "direct HTTP requests" in log_file.read_text(encoding="utf-8")


class TestDiagnosticCommands:
    """Test connectivity and cookie checks."""

    def test_connectivity(self, runner):
        probe = AsyncMock(return_value=ProbeResult("https://chyoa.com", 200, 1234, False))
        with patch("chyoa_downloader.cli.commands.HttpPageSource.probe", probe):
            result = runner.invoke(cli, ["test-connectivity"])
        assert result.exit_code == 0
        assert "Response status: 200" in result.output
        assert "Cloudflare challenge: NO" in result.output

    def test_cookies_working(self, runner):
        probe = AsyncMock(return_value=ProbeResult("u", 200, 50000, False))
        with patch("chyoa_downloader.cli.commands.HttpPageSource.probe", probe):
            result = runner.invoke(cli, ["test-cookies", "-c", "a=b"])
        assert result.exit_code == 0
        assert "Cookies appear to be working" in result.output

    def test_cookies_challenged(self, runner):
        probe = AsyncMock(return_value=ProbeResult("u", 403, 500, True))
        with patch("chyoa_downloader.cli.commands.HttpPageSource.probe", probe):
            result = runner.invoke(cli, ["test-cookies", "-c", "a=b"])
        assert result.exit_code == 0
        assert "Cloudflare challenge: YES" in result.output
        assert "Still being challenged" in result.output

    def test_cookies_require_option(self, runner):
        result = runner.invoke(cli, ["test-cookies"])
        assert result.exit_code == 2

    def test_connectivity_network_error(self, runner):
        probe = AsyncMock(side_effect=FetchError("Network error fetching https://chyoa.com"))
        with patch("chyoa_downloader.cli.commands.HttpPageSource.probe", probe):
            result = runner.invoke(cli, ["test-connectivity"])
        assert result.exit_code == 1
        assert "Network error" in result.output


class TestClearSession:
    """Test the clear-session command."""

    def test_clear_existing(self, runner, tmp_path):
        session_file = tmp_path / "session.json"
        session_file.write_text(
            json.dumps({"cookies": "a=b", "timestamp": int(time.time() * 1000)})
        )
        result = runner.invoke(cli, ["clear-session"])
        assert result.exit_code == 0
        assert "Cleared saved session" in result.output
        assert not session_file.exists()

    def test_clear_missing(self, runner):
        result = runner.invoke(cli, ["clear-session"])
        assert result.exit_code == 0
        assert "No saved session" in result.output
