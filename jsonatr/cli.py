"""
jsonatr command line interface

Renders the output template of one or more spec files into a JSON document.

Usage:
    jsonatr --use spec.json
    jsonatr --use lib.json --use spec.json --in data.json --out result.json
    cat data.json | jsonatr --use lib.json --stdin '{"names": "$.items[*].name"}'
"""

import argparse
import sys
from pathlib import Path
from typing import Any, List, Optional

from jsonatr.config import DEFAULT_MAX_DEPTH, EngineConfig
from jsonatr.display import get_display
from jsonatr.errors import JsonatrError, JsonReadError
from jsonatr.evaluator import Evaluator
from jsonatr.jsonio import parse_json_text, read_json_file, read_json_stdin
from jsonatr.loader import SpecLoader
from jsonatr.spec import Spec


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="jsonatr",
        description="Transform JSON using a spec of named inputs and an output template",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    jsonatr --use spec.json
    jsonatr --use lib.json --in data.json '{"first": "$[0] | unwrap"}'
    cat data.json | jsonatr --use spec.json --stdin --out result.json

Expressions:
    $input.jsonpath | transform(arg, ...) | ...
    Builtin transforms: unwrap, map(input), ifelse(then, else)
        """,
    )
    parser.add_argument(
        "output_spec",
        nargs="?",
        default=None,
        help="Inline output template (JSON; plain text is used as a string template)",
    )
    parser.add_argument(
        "--use",
        dest="uses",
        action="append",
        default=[],
        metavar="FILE",
        help="Spec file to merge in (repeatable)",
    )
    parser.add_argument(
        "--stdin",
        action="store_true",
        default=False,
        help="Read the main input JSON from standard input",
    )
    parser.add_argument(
        "--in",
        dest="input_file",
        default=None,
        metavar="FILE",
        help="Read the main input JSON from FILE",
    )
    parser.add_argument(
        "--out",
        dest="output_file",
        default=None,
        metavar="FILE",
        help="Write the result to FILE instead of standard output",
    )
    parser.add_argument(
        "--usage",
        action="store_true",
        default=False,
        help="Show a short usage line and exit",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum nesting of input resolutions (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Time limit for each COMMAND input (default: none)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Trace input resolution on stderr",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        default=False,
        help="Suppress warnings about expressions left unevaluated",
    )
    return parser


def parse_output_spec(text: str) -> Any:
    """Parse an inline output template.

    Text that is not valid JSON is taken as a single string template,
    so '$name | unwrap' works without extra quoting.
    """
    try:
        return parse_json_text(text, "<output_spec>")
    except JsonReadError:
        return text


def build_spec(uses: List[str], output_spec: Optional[str]) -> Spec:
    """Merge the --use files and the inline output into one spec."""
    spec = Spec()
    loader = SpecLoader()
    for path in uses:
        spec.add_use(path, loader)
    if output_spec is not None:
        spec.add_output(parse_output_spec(output_spec))
    return spec


def read_main_input(use_stdin: bool, input_file: Optional[str]) -> Any:
    """Read the main input, or None when neither source is given."""
    if use_stdin:
        return read_json_stdin()
    if input_file:
        return read_json_file(input_file)
    return None


def write_result(result: str, output_file: Optional[str]) -> None:
    """Write the rendered document to a file or stdout."""
    if output_file:
        try:
            Path(output_file).write_text(result + "\n", encoding="utf-8")
        except OSError as e:
            raise JsonatrError(f"failed to write output to {output_file}: {e}")
    else:
        sys.stdout.write(result + "\n")


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.usage:
        sys.stdout.write(parser.format_usage())
        sys.exit(0)

    display = get_display()

    # Check for mutually exclusive flags
    if args.stdin and args.input_file:
        display.print_error("cannot use both --stdin and --in flags together")
        sys.exit(1)

    try:
        config = EngineConfig(
            max_depth=args.max_depth,
            command_timeout=args.timeout,
            verbose=args.verbose,
            quiet=args.quiet,
        )
    except ValueError as e:
        display.print_error(str(e))
        sys.exit(1)

    try:
        spec = build_spec(args.uses, args.output_spec)
        main_input = read_main_input(args.stdin, args.input_file)
        result = Evaluator(spec, config).transform(main_input)
        write_result(result, args.output_file)
    except KeyboardInterrupt:
        display.print_error("aborted")
        sys.exit(130)
    except JsonatrError as e:
        display.print_error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
