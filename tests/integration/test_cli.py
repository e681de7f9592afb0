"""Integration tests for CLI commands."""

from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from fakes import FakeEpisodeSource, make_raw_episodes
from podcatalog.cli import app
from podcatalog.config.manager import CLIENT_ID_ENV, CLIENT_SECRET_ENV
from podcatalog.utils.retry import AuthenticationError, InvalidRequestError

runner = CliRunner()


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch) -> Path:
    """Point the CLI at an empty config directory."""
    monkeypatch.setattr("podcatalog.config.manager.get_config_dir", lambda: tmp_path)
    monkeypatch.delenv(CLIENT_ID_ENV, raising=False)
    monkeypatch.delenv(CLIENT_SECRET_ENV, raising=False)
    return tmp_path


@pytest.fixture
def use_source(config_dir, monkeypatch):
    """Replace the upstream API with an in-memory source."""

    def install(source: FakeEpisodeSource) -> FakeEpisodeSource:
        monkeypatch.setattr("podcatalog.cli.build_source", lambda manager, config: source)
        return source

    return install


class TestCLIVersion:
    """Tests for version command."""

    def test_version_command(self) -> None:
        """Test version command displays version."""
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "podcatalog" in result.stdout
        assert "0.1.0" in result.stdout


class TestCLIEpisodes:
    """Tests for episodes command."""

    def test_first_page(self, use_source) -> None:
        use_source(FakeEpisodeSource(make_raw_episodes(100)))

        result = runner.invoke(app, ["episodes", "show1"])

        assert result.exit_code == 0
        assert "Episode ep100" in result.stdout
        assert "Page 1 of 10 (episodes 1-10 of 100)" in result.stdout

    def test_page_and_page_size(self, use_source) -> None:
        use_source(FakeEpisodeSource(make_raw_episodes(100)))

        result = runner.invoke(app, ["episodes", "show1", "--page", "2", "--page-size", "20"])

        assert result.exit_code == 0
        assert "Page 2 of 5 (episodes 21-40 of 100)" in result.stdout

    def test_unlimited(self, use_source) -> None:
        use_source(FakeEpisodeSource(make_raw_episodes(60)))

        result = runner.invoke(app, ["episodes", "show1", "-s", "unlimited"])

        assert result.exit_code == 0
        assert "Page 1 of 1 (episodes 1-60 of 60)" in result.stdout

    def test_default_show_from_config(self, use_source, config_dir: Path) -> None:
        source = use_source(FakeEpisodeSource(make_raw_episodes(5)))
        (config_dir / "config.yaml").write_text(yaml.safe_dump({"default_show_id": "configured"}))

        result = runner.invoke(app, ["episodes"])

        assert result.exit_code == 0
        assert source.calls[0][0] == "configured"

    def test_page_size_default_from_config(self, use_source, config_dir: Path) -> None:
        use_source(FakeEpisodeSource(make_raw_episodes(30)))
        (config_dir / "config.yaml").write_text(
            yaml.safe_dump({"browse": {"default_page_size": 15}})
        )

        result = runner.invoke(app, ["episodes", "show1"])

        assert "Page 1 of 2 (episodes 1-15 of 30)" in result.stdout

    def test_no_show_id(self, use_source) -> None:
        use_source(FakeEpisodeSource(make_raw_episodes(5)))

        result = runner.invoke(app, ["episodes"])

        assert result.exit_code == 1
        assert "No show id given" in result.stdout

    def test_invalid_page_size(self, use_source) -> None:
        use_source(FakeEpisodeSource(make_raw_episodes(5)))

        result = runner.invoke(app, ["episodes", "show1", "--page-size", "huge"])

        assert result.exit_code == 1
        assert "Invalid page size" in result.stdout
        assert "unlimited" in result.stdout

    def test_empty_show(self, use_source) -> None:
        use_source(FakeEpisodeSource([]))

        result = runner.invoke(app, ["episodes", "show1"])

        assert result.exit_code == 0
        assert "No episodes found" in result.stdout

    def test_upstream_failure(self, use_source) -> None:
        use_source(FakeEpisodeSource([], fail_offsets={0: AuthenticationError("bad secret")}))

        result = runner.invoke(app, ["episodes", "show1"])

        assert result.exit_code == 1
        assert "Unable to retrieve episodes" in result.stdout

    def test_missing_credentials(self, config_dir) -> None:
        result = runner.invoke(app, ["episodes", "show1"])

        assert result.exit_code == 1
        assert "Missing API credentials" in result.stdout


class TestCLISearch:
    """Tests for search command."""

    def test_found(self, use_source) -> None:
        use_source(FakeEpisodeSource(make_raw_episodes(100)))

        result = runner.invoke(app, ["search", "42", "show1"])

        assert result.exit_code == 0
        assert "Episode ep59" in result.stdout
        assert "Found via mapping" in result.stdout

    def test_out_of_range(self, use_source) -> None:
        use_source(FakeEpisodeSource(make_raw_episodes(100)))

        result = runner.invoke(app, ["search", "150", "show1"])

        assert result.exit_code == 1
        assert "not found" in result.stdout
        assert "1-100" in result.stdout


class TestCLIFilter:
    """Tests for filter command."""

    def test_custom_range(self, use_source) -> None:
        use_source(FakeEpisodeSource(make_raw_episodes(100)))

        result = runner.invoke(
            app, ["filter", "custom", "show1", "--start", "2024-06-01", "--end", "2024-06-30"]
        )

        assert result.exit_code == 0
        assert "30 matching episode(s)" in result.stdout
        assert "Page 1 of 3" in result.stdout

    def test_invalid_filter(self, use_source) -> None:
        use_source(FakeEpisodeSource(make_raw_episodes(10)))

        result = runner.invoke(app, ["filter", "decade", "show1"])

        assert result.exit_code == 1
        assert "Invalid date filter" in result.stdout

    def test_custom_without_dates(self, use_source) -> None:
        use_source(FakeEpisodeSource(make_raw_episodes(10)))

        result = runner.invoke(app, ["filter", "custom", "show1"])

        assert result.exit_code == 1
        assert "Start date and end date are required" in result.stdout


class TestCLIFind:
    """Tests for find command."""

    def test_keyword(self, use_source) -> None:
        use_source(FakeEpisodeSource(make_raw_episodes(100)))

        result = runner.invoke(app, ["find", "2024-06", "show1", "--page-size", "25"])

        assert result.exit_code == 0
        assert "30 matching episode(s)" in result.stdout
        assert "Page 1 of 2 (episodes 1-25 of 30)" in result.stdout

    def test_no_matches(self, use_source) -> None:
        use_source(FakeEpisodeSource(make_raw_episodes(10)))

        result = runner.invoke(app, ["find", "zebra", "show1"])

        assert result.exit_code == 0
        assert "No episodes found" in result.stdout

    def test_blank_query(self, use_source) -> None:
        use_source(FakeEpisodeSource(make_raw_episodes(10)))

        result = runner.invoke(app, ["find", " ", "show1"])

        assert result.exit_code == 1
        assert "must not be empty" in result.stdout


class TestCLICatalog:
    """Tests for catalog command."""

    def test_complete(self, use_source) -> None:
        use_source(FakeEpisodeSource(make_raw_episodes(100)))

        result = runner.invoke(app, ["catalog", "show1"])

        assert result.exit_code == 0
        assert "Fetched 100 of 100 episodes (complete, 2 requests)" in result.stdout
        assert "Newest: #1 Episode ep100" in result.stdout
        assert "Oldest: #100 Episode ep1" in result.stdout

    def test_incomplete(self, use_source) -> None:
        use_source(
            FakeEpisodeSource(make_raw_episodes(100), fail_offsets={50: InvalidRequestError("gone")})
        )

        result = runner.invoke(app, ["catalog", "show1"])

        assert result.exit_code == 0
        assert "Fetched 50 of 100 episodes (incomplete" in result.stdout
        assert "Page at offset 50 failed: gone" in result.stdout

    def test_fatal(self, use_source) -> None:
        use_source(FakeEpisodeSource([], fail_offsets={0: AuthenticationError("bad secret")}))

        result = runner.invoke(app, ["catalog", "show1"])

        assert result.exit_code == 1
        assert "Unable to retrieve episodes for show show1" in result.stdout


class TestCLIConfig:
    """Tests for config commands."""

    def test_show(self, config_dir: Path) -> None:
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "podcatalog Configuration" in result.stdout
        assert "Default page size" in result.stdout
        assert (config_dir / "config.yaml").exists()

    def test_credentials(self, config_dir: Path) -> None:
        result = runner.invoke(
            app, ["config", "credentials", "--client-id", "my-id", "--client-secret", "my-secret"]
        )

        assert result.exit_code == 0
        assert "Credentials saved" in result.stdout

        stored = yaml.safe_load((config_dir / "config.yaml").read_text())
        assert stored["spotify"]["client_id"] == "my-id"
        assert stored["spotify"]["client_secret"].startswith("enc:")

    def test_credentials_prompted(self, config_dir: Path) -> None:
        result = runner.invoke(app, ["config", "credentials"], input="prompted-id\nprompted-secret\n")

        assert result.exit_code == 0
        stored = yaml.safe_load((config_dir / "config.yaml").read_text())
        assert stored["spotify"]["client_id"] == "prompted-id"

    def test_show_after_credentials(self, config_dir: Path) -> None:
        runner.invoke(app, ["config", "credentials", "--client-id", "abc", "--client-secret", "s"])

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "stored" in result.stdout
