"""Main CLI entry point for record-stream."""

import argparse
import json
import logging
import sys

from tqdm import tqdm

from .config import load_reader_config
from .dispatch import build_reader
from .errors import ConfigError, ReaderError

logger = logging.getLogger(__name__)


def configure_logging(log_level: str) -> None:
    """Configure root logging for the CLI."""
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Read a flat file and write its records to stdout as JSON lines",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Read a CSV file
  record-stream --config '{"type": "csv", "file_path": "uspop.csv"}'

  # Read a tab separated file, tolerating rows with missing fields
  record-stream --config '{"type": "csv", "delimiter": "\\t", "flexible": true, "file_path": "data.tsv"}'

  # Read a JSON stream, configuration kept in a YAML file
  record-stream --configFile reader.yaml

  # Stop at the first malformed record
  record-stream --configFile reader.yaml --strict
        """,
    )

    config_group = parser.add_mutually_exclusive_group(required=True)
    config_group.add_argument("--config", help="Reader configuration as an inline YAML/JSON string")
    config_group.add_argument("--configFile", help="Path to a YAML/JSON reader configuration file")

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Abort on the first malformed record instead of logging and skipping it",
    )
    parser.add_argument(
        "--logLevel",
        default="INFO",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO)",
    )
    return parser


def main() -> None:
    """Main CLI entry point for record-stream."""
    parser = build_parser()
    args = parser.parse_args()
    configure_logging(args.logLevel)

    try:
        config = load_reader_config(args.config, args.configFile)
    except (ConfigError, ValueError, FileNotFoundError) as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(1)

    reader = build_reader(config)
    logger.info("Reading %s file: %s", config.type, config.file_path)

    written = 0
    skipped = 0
    try:
        with reader, tqdm(file=sys.stderr, desc="Reading records", unit=" records") as progress:
            while True:
                try:
                    record = reader.read_item()
                except StopIteration:
                    break
                except ReaderError as e:
                    if e.fatal or args.strict:
                        raise
                    skipped += 1
                    logger.warning("Skipping malformed record: %s", e)
                    continue

                sys.stdout.write(json.dumps(record, ensure_ascii=False) + "\n")
                written += 1
                progress.update(1)

    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        sys.exit(130)

    except ReaderError as e:
        logger.exception("Reading failed: %s", e)
        sys.exit(1)

    logger.info("Read complete! Records written: %s | Records skipped: %s", written, skipped)


if __name__ == "__main__":
    main()
