"""CLI entry point for media importer."""

import argparse
import json
import logging
import sys
from pathlib import Path

from .. import __version__
from ..core import (
    ApplicationConfig,
    EmptySelectionError,
    ImportExecutor,
    MediaImporterError,
    MetadataDispatcher,
    TreeBuilder,
    collect_selection,
    set_checked,
)
from ..ui.presenters import render_tree, scan_summary


def setup_logging(level: str = "INFO") -> None:
    """
    Set up logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def scan_command(directory: Path, config: ApplicationConfig, output_format: str = "text") -> int:
    """Print the media tree under `directory`."""
    result = TreeBuilder(config).build(directory)

    if output_format == "json":
        print(result.model_dump_json(indent=2))
        return 0

    print("\n".join(render_tree(result.root)))
    print()
    print(scan_summary(result))
    for skipped in result.skipped_paths:
        print(f"  skipped: {skipped}")
    return 0


def describe_command(file_path: Path, config: ApplicationConfig, output_format: str = "text") -> int:
    """Print the metadata record of a single file."""
    record = MetadataDispatcher(config).describe(file_path)

    if output_format == "json":
        rows = [{"label": label, "value": value} for label, value in record.as_pairs()]
        print(json.dumps(rows, indent=2))
    else:
        width = max((len(label) for label in record.labels()), default=0)
        for label, value in record.as_pairs():
            print(f"{label.ljust(width)}  {value}")

    return 1 if record.get("Error") is not None else 0


def import_command(
    source: Path, destination: Path, config: ApplicationConfig, output_format: str = "text"
) -> int:
    """Copy every supported file under `source` into `destination`."""
    scan = TreeBuilder(config).build(source)
    set_checked(scan.root, True)
    selected = collect_selection(scan.root)

    def progress_callback(current: int, total: int | None = None, message: str = "") -> None:
        if output_format == "text":
            print(f"\r[{current}/{total}] {message}", end="", flush=True)

    result = ImportExecutor().copy(selected, destination, progress_callback)

    if output_format == "json":
        print(result.model_dump_json(indent=2))
    else:
        print()
        print(result)
        if not result.success:
            print(f"  failed on: {result.failed_path}")

    return 0 if result.success else 1


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="Media Importer - Browse, inspect and import photos and videos",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Launch GUI
  media-importer

  # Show the media tree of a memory card
  media-importer --scan /media/card

  # Show metadata of one file
  media-importer --describe /media/card/DCIM/IMG_0001.JPG

  # Copy every photo and video from a card
  media-importer --import /media/card --dest ~/Pictures/inbox
        """,
    )

    # Main actions
    action = parser.add_mutually_exclusive_group()
    action.add_argument(
        "--scan", type=Path, metavar="DIRECTORY", help="Print the media tree of a directory"
    )
    action.add_argument(
        "--describe", type=Path, metavar="FILE", help="Print the metadata of a file"
    )
    action.add_argument(
        "--import",
        dest="import_source",
        type=Path,
        metavar="DIRECTORY",
        help="Copy all supported files under DIRECTORY (requires --dest)",
    )

    parser.add_argument("--dest", type=Path, metavar="DIRECTORY", help="Import destination")

    parser.add_argument(
        "--ffmpeg", metavar="PATH", help="ffmpeg executable used for video previews"
    )

    # Output options
    parser.add_argument(
        "--output-format",
        choices=["text", "json"],
        default="text",
        help="Output format for results (default: text)",
    )

    # Logging options
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging level (default: INFO)",
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the CLI application.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.import_source and not args.dest:
        parser.error("--import requires --dest")

    # Set up logging
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    overrides = {"log_level": args.log_level}
    if args.ffmpeg:
        overrides["ffmpeg_path"] = args.ffmpeg
    config = ApplicationConfig(**overrides)

    try:
        if args.scan:
            logger.info("Running in CLI scan mode")
            return scan_command(args.scan, config, args.output_format)

        if args.describe:
            logger.info("Running in CLI describe mode")
            return describe_command(args.describe, config, args.output_format)

        if args.import_source:
            logger.info("Running in CLI import mode")
            return import_command(args.import_source, args.dest, config, args.output_format)

        # GUI mode
        logger.info("Running in GUI mode")

        try:
            from ..ui.main_window import MainWindow
        except ImportError:
            print("Error: tkinter is not available. GUI mode requires tkinter.")
            print("Try running with --scan, --describe or --import for command-line mode.")
            return 1

        app = MainWindow(config)
        app.run()
        return 0

    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user.")
        return 1
    except EmptySelectionError:
        print("Error: no supported media files found to import.")
        return 1
    except (FileNotFoundError, NotADirectoryError, MediaImporterError) as e:
        print(f"Error: {e}")
        return 1
    except Exception as e:
        logger.exception("Unexpected error occurred")
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
