"""Test the command-line interface"""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from snag.archive.builder import ArchiveResult
from snag.cli import cli
from snag.core.exceptions import (
    EmptyPlaylistError,
    EnvelopeError,
    InvalidIdentifierError,
    NetworkError,
    NotFoundError,
    SnagError,
)


def _returning(result):
    async def fake_run_snag(*args, **kwargs):
        return result
    return fake_run_snag


def _raising(error):
    async def fake_run_snag(*args, **kwargs):
        raise error
    return fake_run_snag


@pytest.fixture
def runner(temp_dir, monkeypatch):
    # no config.yaml in the working directory
    monkeypatch.chdir(temp_dir)
    return CliRunner()


class TestCli:
    """Test CLI behavior and exit codes"""

    def test_writes_archive(self, runner, temp_dir):
        result = ArchiveResult(data=b"PK\x05\x06" + b"\x00" * 18, filename="x - track assets [snagged].zip",
                               images_complete=True)

        with patch("snag.cli.run_snag", _returning(result)):
            outcome = runner.invoke(cli, ["someone/x", "--output", str(temp_dir / "out")])

        assert outcome.exit_code == 0
        assert (temp_dir / "out" / "x - track assets [snagged].zip").read_bytes() == result.data
        assert list((temp_dir / "out" / "logs").glob("log_full_*"))

    def test_passes_options(self, runner, temp_dir):
        seen = {}

        async def fake_run_snag(identifier, content_type, config, *, all_pages, show_progress):
            seen.update(identifier=identifier, content_type=content_type, all_pages=all_pages)
            return ArchiveResult(data=b"zip", filename="a.zip", images_complete=True)

        with patch("snag.cli.run_snag", fake_run_snag):
            outcome = runner.invoke(
                cli,
                ["abc123", "--type", "track", "--all-pages", "--output", str(temp_dir)]
            )

        assert outcome.exit_code == 0
        assert seen == {"identifier": "abc123", "content_type": "track", "all_pages": True}

    @pytest.mark.parametrize("error, code", [
        (InvalidIdentifierError("bad"), 2),
        (NotFoundError("missing"), 3),
        (EmptyPlaylistError("empty"), 4),
        (NetworkError("down", status=503), 5),
        (EnvelopeError("garbage"), 5),
        (SnagError("other"), 6),
        (RuntimeError("surprise"), 1),
    ])
    def test_exit_codes(self, runner, temp_dir, error, code):
        with patch("snag.cli.run_snag", _raising(error)):
            outcome = runner.invoke(cli, ["someone", "--output", str(temp_dir)])

        assert outcome.exit_code == code

    def test_missing_config_file(self, runner, temp_dir):
        outcome = runner.invoke(cli, ["someone", "--config", str(temp_dir / "nope.yaml")])

        assert outcome.exit_code == 1
        assert "Configuration error" in outcome.output

    def test_invalid_type_rejected_by_click(self, runner):
        outcome = runner.invoke(cli, ["someone", "--type", "podcast"])
        assert outcome.exit_code == 2

    def test_version(self, runner):
        outcome = runner.invoke(cli, ["--version"])
        assert outcome.exit_code == 0
        assert "0.1.0" in outcome.output
