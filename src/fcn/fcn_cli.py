"""
FCN CLI Entrypoint.

This module provides the command-line interface for the FCN front end.
It reads one source file, parses it, prints the syntax tree dump and writes the
same dump next to the source as `<path>.ast`.

Features:
    - Parse a source file into a `Program` tree.
    - Print the tree as debug text (default) or JSON (`--json`).
    - Persist the dump to a sidecar file; write failures are logged, not fatal.
    - Exit with status 1 and a one-line message on read or parse failure.

Example usage:
    fcn hello.fcn
    fcn hello.fcn --json
    fcn hello.fcn --verbose

Functions:
    run_fcn(path: str, fmt: str = "debug", write_sidecar: bool = True) -> str:
        Executes the pipeline (read -> parse -> dump -> print/persist).

    main(argv: list[str] | None = None) -> None:
        Parses CLI arguments and invokes `run_fcn`.
"""

import argparse
import logging
import sys

from fcn.fcn_constants import AST_SUFFIX
from fcn.fcn_dump import dump
from fcn.fcn_errors import ParseError
from fcn.fcn_parser import parse

logger = logging.getLogger(__name__)


def write_sidecar_file(path: str, text: str) -> bool:
    """Writes `text` to `path + AST_SUFFIX`. Returns False and logs on failure."""
    out = path + AST_SUFFIX
    try:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text)
    except OSError as e:
        logger.warning("Could not write %s: %s", out, e)
        return False
    logger.debug("Wrote %s", out)
    return True


def run_fcn(path: str, fmt: str = "debug", write_sidecar: bool = True) -> str:
    """
    Run the FCN front end on one file: read, parse, dump, print and persist.

    Args:
        path (str): Path of the source file.
        fmt (str): Dump format, "debug" or "json". Defaults to "debug".
        write_sidecar (bool): If True, also write the dump to `<path>.ast`.

    Returns:
        str: The dump text that was printed.

    Raises:
        OSError: If the source file cannot be read.
        UnicodeDecodeError: If the source file is not valid UTF-8.
        ParseError: If the source does not parse.
    """
    with open(path, encoding="utf-8") as f:
        source = f.read()
    logger.debug("Read %d characters from %s", len(source), path)

    program = parse(source)
    text = dump(program, fmt)
    print(text)

    if write_sidecar:
        write_sidecar_file(path, text)
    return text


def main(argv: list[str] | None = None) -> None:
    """
    Entry point for the FCN CLI.

    Supported flags:
        - `source`: Path of the file to parse.
        - `--json`: Dump JSON instead of debug text.
        - `-v`, `--verbose`: Log debug messages to stderr.

    Exits with status 1 if the file cannot be read or does not parse.
    """
    parser = argparse.ArgumentParser(
        prog="fcn", description="Parse an FCN source file and dump its syntax tree."
    )
    parser.add_argument("source", help="Path of the FCN source file")
    parser.add_argument(
        "--json",
        dest="fmt",
        action="store_const",
        const="json",
        default="debug",
        help="Dump the tree as JSON instead of debug text",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        run_fcn(args.source, fmt=args.fmt)
    except (OSError, UnicodeDecodeError) as e:
        sys.exit(f"error: cannot read {args.source}: {e}")
    except ParseError as e:
        sys.exit(f"error: {args.source}: {e}")


if __name__ == "__main__":
    main()
