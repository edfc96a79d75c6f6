import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .config import load_settings
from .csv_io.records import RecordFormatError, write_statements
from .logging_setup import setup_logging
from .processor import Processor
from .storage.reject_store import RejectStore


def csv_file(value: str) -> Path:
    path = Path(value)
    if path.suffix.lower() != ".csv":
        raise argparse.ArgumentTypeError(f"File provided is not csv: {value}")
    if not path.is_file():
        raise argparse.ArgumentTypeError(f"Path {value} does not exist")
    return path


def positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value}") from None
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1: {value}")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payments-ledger",
        description="Apply a CSV of transactions and print per-client account statements as CSV.",
    )
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    parser.add_argument(
        "csv_file",
        nargs="?",
        type=csv_file,
        metavar="CSV_FILE",
        help="Input CSV with columns: type, client, tx, amount",
    )
    parser.add_argument(
        "--workers",
        type=positive_int,
        default=None,
        help="Number of account shards applied in parallel. Default: LEDGER_WORKERS or 1",
    )
    parser.add_argument(
        "--rejects",
        type=Path,
        default=None,
        help="Append rejected rows to this JSONL file. Default: LEDGER_REJECTS_PATH (disabled if unset)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return 0

    if args.csv_file is None:
        parser.error("the following arguments are required: CSV_FILE")

    settings = load_settings()
    setup_logging(settings.log_level)

    logger = logging.getLogger(__name__)

    workers = args.workers if args.workers is not None else settings.workers
    rejects_path = args.rejects if args.rejects is not None else settings.rejects_path

    processor = Processor(
        workers=workers,
        reject_store=RejectStore(rejects_path) if rejects_path is not None else None,
    )

    logger.info("Reading %s (workers=%s)", args.csv_file, workers)
    try:
        with args.csv_file.open("r", encoding="utf-8-sig", newline="") as f:
            processor.run(f)
    except RecordFormatError as e:
        logger.error("Cannot read %s: %s", args.csv_file, e)
        return 1

    write_statements(processor.registry.statements(), sys.stdout)
    return 0
