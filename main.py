"""
DirSizeViewer
=============

Pick a folder and see its files and subfolders sorted by size.

Features:
- Folder sizes include everything below them (recursive)
- Unreadable subfolders count as 0 instead of failing the scan
- Does not follow symbolic links
- Sizing runs in a background process, rows appear as they are ready
- Click a column heading to sort by it

Usage:
    python main.py [PATH] [--log-level LEVEL]

Requirements:
    - Python 3.9+ with tkinter
    - Standard library only
"""
import argparse
import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_LEVEL_ENV = "DIRSIZE_LOG_LEVEL"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def build_parser():
    parser = argparse.ArgumentParser(
        prog="dirsize-viewer",
        description="Show the files and folders of a folder sorted by size",
    )
    parser.add_argument("path", nargs="?", help="Folder to scan on start-up")
    parser.add_argument(
        "--log-level",
        default=os.environ.get(LOG_LEVEL_ENV, "WARNING"),
        type=str.upper,
        choices=LOG_LEVELS,
        help=f"Logging verbosity (default: WARNING, or ${LOG_LEVEL_ENV})",
    )
    return parser


def parse_args(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    # argparse does not check defaults against choices
    if args.log_level not in LOG_LEVELS:
        parser.error(f"invalid ${LOG_LEVEL_ENV}: {args.log_level!r} (choose from {', '.join(LOG_LEVELS)})")
    return args


def configure_logging(level):
    logging.basicConfig(level=getattr(logging, level), format=LOG_FORMAT)


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.log_level)

    # Import here to handle multiprocessing properly on Windows
    from gui import run
    run(args.path)


if __name__ == "__main__":
    main()
