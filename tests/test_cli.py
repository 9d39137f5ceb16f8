"""Integration tests for the command line interface"""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from catbreeds.cli import cli


@pytest.fixture
def config_file(temp_dir):
    path = temp_dir / "config.yaml"
    path.write_text(
        "cache:\n"
        f"  database: {temp_dir / 'data' / 'breeds.db'}\n"
        "sync:\n"
        "  page_size: 2\n"
        "logging:\n"
        f"  directory: {temp_dir / 'logs'}\n"
        "  level: WARNING\n",
        encoding="utf-8"
    )
    return path


@pytest.fixture
def run(config_file, fake_remote, monkeypatch):
    """Invoke the CLI against the fake remote catalog"""
    monkeypatch.delenv("CAT_API_KEY", raising=False)
    runner = CliRunner()

    def invoke(*args, **kwargs):
        with patch("catbreeds.cli.CatApiClient", return_value=fake_remote):
            return runner.invoke(cli, ["--config", str(config_file), *args], **kwargs)

    return invoke


class TestCli:
    """End-to-end command runs"""

    def test_missing_config_file(self, temp_dir):
        result = CliRunner().invoke(cli, ["--config", str(temp_dir / "nope.yaml"), "status"])

        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_list_creates_cache_and_shows_page(self, run, temp_dir):
        result = run("list")

        assert result.exit_code == 0, result.output
        assert "Abyssinian" in result.output
        assert (temp_dir / "data" / "breeds.db").exists()

    def test_list_page_is_clamped(self, run):
        run("init")

        result = run("list", "--page", "9")

        assert result.exit_code == 0, result.output
        assert "Page 2 of 2" in result.output
        assert "Siamese" in result.output

    def test_list_offline_uses_cache(self, run, fake_remote):
        run("init")
        fake_remote.offline = True

        result = run("list")

        assert result.exit_code == 0, result.output
        assert "Abyssinian" in result.output
        assert "Offline" in result.output

    def test_favorite_toggle_and_list(self, run):
        run("init")

        added = run("favorite", "abys")
        favorites = run("favorites")

        assert added.exit_code == 0
        assert "added to favorites" in added.output
        assert "Abyssinian" in favorites.output

    def test_favorite_unknown_breed(self, run):
        result = run("favorite", "nope")

        assert result.exit_code == 4
        assert "not found" in result.output

    def test_show(self, run):
        run("init")

        result = run("show", "beng")

        assert result.exit_code == 0, result.output
        assert "Bengal" in result.output
        assert "United States" in result.output

    def test_search(self, run):
        result = run("search", "sia")

        assert result.exit_code == 0, result.output
        assert "Siamese" in result.output

    def test_status(self, run):
        run("init")

        result = run("status")

        assert result.exit_code == 0, result.output
        assert "online" in result.output

    def test_clear_cache_requires_confirmation(self, run):
        run("init")

        aborted = run("clear-cache", input="n\n")
        cleared = run("clear-cache", "--yes")

        assert aborted.exit_code == 1
        assert cleared.exit_code == 0
        assert "Cache cleared" in cleared.output
