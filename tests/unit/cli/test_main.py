"""Unit tests for the dr CLI.

Runs the Typer application end to end against a temporary holding
directory.
"""

from pathlib import Path

import pytest
from dropctl.cli.main import app
from dropctl.store.codec import encode
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def cli_workdir(workdir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the CLI from inside the work directory."""
    monkeypatch.chdir(workdir)
    return workdir


def _dr(holding_dir: Path, *args: str):  # type: ignore[no-untyped-def]
    return runner.invoke(app, ["--holding-dir", str(holding_dir), *args])


class TestHelpAndVersion:
    """Tests for --help and --version."""

    @pytest.mark.parametrize("flag", ["--help", "-h"])
    def test_help(self, flag: str, holding_dir: Path) -> None:
        """Help prints usage and touches nothing."""
        result = _dr(holding_dir, flag)

        assert result.exit_code == 0
        assert "--recover" in result.output
        assert "--delete" in result.output
        assert "--list" in result.output
        assert not holding_dir.exists()

    def test_version(self) -> None:
        """--version prints the version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "version" in result.output


class TestRequestErrors:
    """Malformed invocations are rejected before any filesystem access."""

    @pytest.mark.parametrize("args", [[], ["-r"], ["--delete"]])
    def test_missing_paths(self, args: list[str], holding_dir: Path) -> None:
        """Drop, recover and purge without paths exit with code 2."""
        result = _dr(holding_dir, *args)

        assert result.exit_code == 2
        assert "Missing filepaths" in result.output
        assert not holding_dir.exists()

    def test_exclusive_modes(self, holding_dir: Path) -> None:
        """Only one mode flag may be given."""
        result = _dr(holding_dir, "-r", "-d", "foo.txt")

        assert result.exit_code == 2
        assert "mutually exclusive" in result.output
        assert not holding_dir.exists()

    def test_list_with_paths(self, holding_dir: Path) -> None:
        """--list does not accept paths."""
        result = _dr(holding_dir, "-l", "foo.txt")

        assert result.exit_code == 2
        assert not holding_dir.exists()


class TestDropRecoverPurge:
    """End-to-end verb tests."""

    def test_drop_list_recover(self, holding_dir: Path, cli_workdir: Path) -> None:
        """A file can be dropped, listed and recovered."""
        target = cli_workdir / "foo.txt"
        target.write_text("payload")
        resolved = str(cli_workdir.resolve() / "foo.txt")

        dropped = _dr(holding_dir, "foo.txt")
        assert dropped.exit_code == 0
        assert f"Dropped: {resolved}" in dropped.output
        assert not target.exists()

        listed = _dr(holding_dir, "-l")
        assert listed.exit_code == 0
        assert listed.output.splitlines().count(resolved) == 1

        recovered = _dr(holding_dir, "-r", "foo.txt")
        assert recovered.exit_code == 0
        assert f"Recovered: {resolved}" in recovered.output
        assert target.read_text() == "payload"

        assert _dr(holding_dir, "--list").output.strip() == ""

    def test_purge(self, holding_dir: Path, cli_workdir: Path) -> None:
        """-d deletes the dropped entry for good."""
        (cli_workdir / "foo.txt").write_text("payload")
        _dr(holding_dir, "foo.txt")

        purged = _dr(holding_dir, "-d", "foo.txt")
        assert purged.exit_code == 0
        assert "Permanently deleted" in purged.output
        assert list(holding_dir.iterdir()) == []

        again = _dr(holding_dir, "-r", "foo.txt")
        assert again.exit_code == 1
        assert "No dropped entry found" in again.output

    def test_partial_failure_continues(self, holding_dir: Path, cli_workdir: Path) -> None:
        """A missing path fails without stopping the batch; exit code is 1."""
        (cli_workdir / "real.txt").write_text("x")

        result = _dr(holding_dir, "ghost.txt", "real.txt")

        assert result.exit_code == 1
        assert "File not found" in result.output
        assert "Dropped:" in result.output
        assert not (cli_workdir / "real.txt").exists()

    def test_recover_refuses_overwrite(self, holding_dir: Path, cli_workdir: Path) -> None:
        """Recovering over a recreated file fails and keeps both copies."""
        target = cli_workdir / "foo.txt"
        target.write_text("old")
        _dr(holding_dir, "foo.txt")
        target.write_text("new")

        result = _dr(holding_dir, "-r", "foo.txt")

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert target.read_text() == "new"
        assert len(list(holding_dir.iterdir())) == 1

    def test_bracketed_names_are_printed_verbatim(
        self, holding_dir: Path, cli_workdir: Path
    ) -> None:
        """Paths that look like Rich markup are not interpreted."""
        (cli_workdir / "[bold]x[red].txt").write_text("x")

        dropped = _dr(holding_dir, "[bold]x[red].txt")
        listed = _dr(holding_dir, "-l")

        assert dropped.exit_code == 0
        assert "[bold]x[red].txt" in dropped.output
        assert "[bold]x[red].txt" in listed.output


class TestList:
    """Tests for --list output."""

    def test_foreign_names_shown_verbatim(self, holding_dir: Path) -> None:
        """Undecodable names are listed as-is and do not fail the command."""
        holding_dir.mkdir()
        (holding_dir / "no-separator").write_text("?")
        (holding_dir / encode(1700000000, "/a/b/foo.txt")).write_text("x")

        result = _dr(holding_dir, "-l")

        assert result.exit_code == 0
        assert result.output.splitlines() == ["/a/b/foo.txt", "no-separator"]

    def test_long_listing(self, holding_dir: Path) -> None:
        """--long shows a table with drop time and stored name."""
        holding_dir.mkdir()
        (holding_dir / encode(0, "/x")).write_text("x")

        result = _dr(holding_dir, "-l", "--long")

        assert result.exit_code == 0
        assert "Dropped Entries" in result.output
        assert "1970-01-01 00:00:00" in result.output
        assert "1 entry" in result.output

    def test_long_listing_out_of_range_timestamp(self, holding_dir: Path) -> None:
        """A hand-made name with an undisplayable timestamp is listed without a date."""
        holding_dir.mkdir()
        (holding_dir / "99999999999999_%2Ftmp%2Fx").write_text("x")

        result = _dr(holding_dir, "-l", "--long")

        assert result.exception is None
        assert result.exit_code == 0
        assert "/tmp/x" in result.output
        assert "1 entry" in result.output

    def test_long_listing_empty(self, holding_dir: Path) -> None:
        """An empty store says so in long mode."""
        result = _dr(holding_dir, "-l", "--long")

        assert result.exit_code == 0
        assert "No dropped entries" in result.output

    def test_list_creates_holding_dir(self, holding_dir: Path) -> None:
        """The holding directory is created on first use."""
        result = _dr(holding_dir, "-l")

        assert result.exit_code == 0
        assert holding_dir.is_dir()


class TestFatalErrors:
    """Errors that abort the whole invocation."""

    def test_holding_dir_blocked_by_file(self, tmp_path: Path, cli_workdir: Path) -> None:
        """An uncreatable holding directory exits with code 1."""
        blocker = tmp_path / "blocker"
        blocker.write_text("file")
        (cli_workdir / "foo.txt").write_text("x")

        result = _dr(blocker, "foo.txt")

        assert result.exit_code == 1
        assert "Cannot create holding directory" in result.output
        assert (cli_workdir / "foo.txt").exists()

    def test_relative_holding_dir(self) -> None:
        """A relative --holding-dir is a configuration error."""
        result = runner.invoke(app, ["--holding-dir", "relative", "-l"])

        assert result.exit_code == 1
        assert "Invalid holding directory" in result.output

    def test_environment_holding_dir(
        self, tmp_path: Path, cli_workdir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """DROPCTL_HOLDING_DIR is honoured when no option is given."""
        env_dir = tmp_path / "env-holding"
        monkeypatch.setenv("DROPCTL_HOLDING_DIR", str(env_dir))
        (cli_workdir / "foo.txt").write_text("x")

        result = runner.invoke(app, ["foo.txt"])

        assert result.exit_code == 0
        assert len(list(env_dir.iterdir())) == 1
