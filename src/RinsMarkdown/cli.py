from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import converter
from .errors import DocumentIOError, ParsingError
from .utils import configure_logging, resolve_output_path

VERSION = "0.1.0"

CREDITS = (
    "CREDITS\n\n"
    "This parser was developed as part of the Rust Programming Language course at NaUKMA "
    "with the support of the Ukrainian Rust community.\n"
    "Grammar is far from an ideal one, use with caution."
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rins-markdown",
        description="Convert a restricted markdown dialect into HTML fragments.",
    )
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command")

    parse_cmd = commands.add_parser("parse", help="Parse markdown and return it in HTML format")
    parse_cmd.add_argument("-t", "--text", help="Markdown text given on the command line")
    parse_cmd.add_argument("-I", "--in", dest="input_file", help="Path to the markdown file to read")
    parse_cmd.add_argument("-O", "--out", dest="output_file", help="Path (or directory) for the HTML output")

    commands.add_parser("credits", help="Display credits and project information")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)

    if args.command == "credits":
        print(CREDITS)
        return 0
    if args.command != "parse":
        parser.print_help()
        return 2

    if args.text is not None and (args.input_file or args.output_file):
        parser.error("--text cannot be combined with --in/--out")
    if args.text is None and not args.input_file:
        parser.error("either --text or --in is required")

    try:
        if args.text is not None:
            converter.parse_to_console(args.text)
            return 0
        input_path = Path(args.input_file).expanduser()
        output_path = resolve_output_path(input_path, args.output_file)
        logging.info("Converting %s to %s", input_path, output_path)
        converter.md_to_html_file(input_path, output_path)
        logging.info("Done. Saved to %s", output_path)
    except (ParsingError, DocumentIOError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
