"""
Command-line interface for snag.

This module implements the CLI using Click, providing one command that
resolves Audius content and writes its archive to disk.
rich-click is used for the output colors.

Usage:
    snag someone                                 # Artist profile archive
    snag someone/some-track                      # Track archive
    snag someone/album/some-album                # Album archive
    snag https://audius.co/someone/playlist/mix  # Full URLs work too
    snag abc123 --type track                     # Bare ids need --type
    snag someone --all-pages                     # Every page of tracks/playlists

Options:
    --type <kind>           artist, track, playlist or album (default: inferred)
    --output <dir>          Where the archive is written (default: config)
    --config <file>         Configuration file (default: ./config.yaml if present)
    --all-pages             Fetch every page of an artist's listings
    --verbose               Show debug messages on the console

Exit Codes:
    0    Archive written
    1    Configuration error or unexpected error
    2    Invalid identifier
    3    Content not found
    4    Playlist or album has no tracks
    5    Audius API unreachable or answered with garbage
    6    Any other snag error
    130  Interrupted by user
"""

import asyncio
import sys
from pathlib import Path

import rich_click as click

# Configure rich-click for better help formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = ""
click.rich_click.MAX_WIDTH = 100
click.rich_click.OPTION_GROUPS = {
    "cli": [
        {
            "name": "Content",
            "options": ["--type", "--all-pages"],
        },
        {
            "name": "Output",
            "options": ["--output", "--config", "--verbose"],
        },
        {
            "name": "Info",
            "options": ["--version", "--help"],
        },
    ],
}

from snag import __version__
from snag.archive.builder import ArchiveResult
from snag.core import (
    Config,
    ConfigError,
    EmptyPlaylistError,
    EnvelopeError,
    InvalidIdentifierError,
    NetworkError,
    NotFoundError,
    SnagError,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from snag.core.logger import format_archive_message
from snag.engine import run_snag, write_archive

logger = get_logger(__name__)


@click.command()
@click.argument("identifier", metavar="<identifier>")
@click.option(
    "--type", "content_type",
    type=click.Choice(["artist", "track", "playlist", "album"]),
    default=None,
    help="Content type (inferred from the path when omitted)"
)
@click.option(
    "--output", "output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    metavar="<dir>",
    help="Directory where the archive is written"
)
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file"
)
@click.option(
    "--all-pages",
    is_flag=True,
    help="Fetch every page of an artist's tracks and playlists"
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Show debug messages on the console"
)
@click.version_option(__version__, "--version", prog_name="snag")
def cli(
    identifier: str,
    content_type: str | None,
    output_dir: Path | None,
    config_path: Path | None,
    all_pages: bool,
    verbose: bool
) -> None:
    """
    snag: Archive Audius artists, tracks, playlists and albums.

    Resolves the content, fetches everything nested under it, and writes a
    ZIP with Markdown and HTML descriptions, a metadata.json manifest and
    the best available artwork.

    \b
    EXAMPLES:
        snag someone
        snag someone/some-track
        snag someone/album/some-album
        snag abc123 --type track
    """
    options = {
        "identifier": identifier,
        "content_type": content_type,
        "output_dir": output_dir,
        "config_path": config_path,
        "all_pages": all_pages,
        "verbose": verbose,
    }
    _run_snag(options)


def _run_snag(options: dict) -> None:
    """
    Execute the archive workflow based on CLI options.

    This is the main orchestration function that:
    1. Loads configuration
    2. Sets up logging
    3. Resolves, hydrates and packages the content
    4. Writes the archive and reports the result

    Raises:
        SystemExit: On fatal errors (with appropriate exit code).
    """
    try:
        config = _load_configuration(options["config_path"])
        output_dir = options["output_dir"] or config.output.directory
        output_dir = output_dir.expanduser().resolve()

        setup_logging(output_dir, verbose=options["verbose"])
        logger.info(f"snag {__version__} starting")

        result = asyncio.run(run_snag(
            options["identifier"],
            options["content_type"],
            config,
            all_pages=options["all_pages"],
            show_progress=True
        ))

        path = write_archive(result, output_dir)
        _report_result(result, path)

    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    except InvalidIdentifierError as e:
        click.echo(f"Invalid identifier: {e.message}", err=True)
        logger.error(f"Invalid identifier: {e.message}")
        sys.exit(2)

    except NotFoundError as e:
        click.echo(f"Not found: {e.message}", err=True)
        logger.error(f"Not found: {e.message}", extra={"details": e.details})
        sys.exit(3)

    except EmptyPlaylistError as e:
        click.echo(f"Nothing to archive: {e.message}", err=True)
        logger.error(f"Nothing to archive: {e.message}")
        sys.exit(4)

    except (NetworkError, EnvelopeError) as e:
        click.echo(f"Audius API error: {e.message}", err=True)
        logger.error(f"Audius API error: {e.message}", exc_info=True)
        sys.exit(5)

    except SnagError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}", exc_info=True)
        sys.exit(6)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.info("Interrupted by user")
        sys.exit(130)

    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        logger.exception("Unexpected error")
        sys.exit(1)

    finally:
        shutdown_logging()


def _load_configuration(config_path: Path | None) -> Config:
    """
    Load and validate configuration.

    Raises:
        ConfigError: If configuration is invalid, or an explicit file is missing.
    """
    return load_config(config_path)


def _report_result(result: ArchiveResult, path: Path) -> None:
    """
    Log where the archive went and which images are missing.
    """
    logger.info(format_archive_message(result.filename, result.size, result.images_complete))
    logger.info(f"Saved to: {path}")

    if not result.images_complete:
        logger.warning(f"{len(result.warnings)} image(s) could not be downloaded:")
        for warning in result.warnings:
            logger.warning(f"  {warning}")


def main() -> None:
    """
    Entry point for the CLI.

    This function is called when running `snag` from the command line.
    """
    cli()


if __name__ == "__main__":
    main()
