"""
CLI interface for mdtokens.

Pipe-friendly token extraction: reads Markdown (or mdast JSON), attaches
`:name:` / `:^name:` / `:name^:` tokens to the tree, and prints the result
as Markdown, mdast JSON, or a token report.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Collection

from .config import get_config
from .dom import Node
from .formats import markdown as _markdown  # noqa: F401 - ensure markdown format is registered
from .formats.base import FormatStrategy, registry
from .formats.json import JSONStrategy
from .tokens import PreconditionViolation, collect_tokens, parse_tokens, token_markers

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("markdown", "json", "tokens")


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    cfg = get_config()

    parser = argparse.ArgumentParser(
        prog="mdtokens",
        description="Attach :token: markers in Markdown to the document tree",
    )

    parser.add_argument(
        "file",
        nargs="?",
        help="Input file (reads from stdin if not provided)",
    )

    parser.add_argument(
        "--type",
        "-t",
        type=str,
        dest="format_type",
        help="Force input format (markdown, json) or extension",
    )

    parser.add_argument(
        "--output",
        "-o",
        choices=OUTPUT_FORMATS,
        default=cfg.output.format,
        help="Output format (default: %(default)s)",
    )

    parser.add_argument(
        "--collapse",
        "-c",
        action="append",
        metavar="TYPE",
        dest="collapsible_types",
        help="Node type dissolved when left empty (repeatable, default: paragraph)",
    )

    parser.add_argument(
        "--indent",
        type=int,
        help="JSON indentation",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )

    return parser.parse_args(args)


def setup_logging(verbose: int) -> None:
    """Set up logging based on verbosity level."""
    if verbose == 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(level=level, format="%(levelname)s:%(name)s:%(message)s")


def read_input(filepath: str | None) -> tuple[str, str | None]:
    """Read content from a file or stdin. Returns (content, filename)."""
    if filepath:
        with open(filepath, encoding="utf-8") as f:
            return f.read(), filepath
    return sys.stdin.read(), None


def get_strategy(
    content: str,
    filename: str | None,
    force_type: str | None,
) -> FormatStrategy:
    """Get format strategy via override, detection, or fallback to markdown."""
    if force_type:
        strategy = registry.get(force_type)
        if strategy is None:
            raise ValueError(f"Unknown input type: {force_type}")
        return strategy

    strategy = registry.detect(content, filename) or registry.get("markdown")
    if strategy is None:
        raise RuntimeError("No format strategy available")
    return strategy


def process(
    content: str,
    filename: str | None = None,
    format_type: str | None = None,
    collapsible_types: Collection[str] | None = None,
) -> Node:
    """
    Parse content and attach its tokens.

    Args:
        content: Raw document text
        filename: Optional filename for format detection
        format_type: Force specific format strategy
        collapsible_types: Node types dissolved when emptied (config default if None)

    Returns:
        The transformed root
    """
    strategy = get_strategy(content, filename, format_type)
    root = strategy.parse(content)
    logger.info("Parsed %s input with %s strategy", filename or "<stdin>", strategy.name)

    if collapsible_types is None:
        collapsible_types = get_config().tokens.collapsible_types
    return parse_tokens(root, collapsible_types)


def format_token_report(root: Node) -> str:
    """One line per tagged node: attached tokens, then token markers."""
    lines = [f"{path}\ttokens={','.join(tokens)}" for path, tokens in collect_tokens(root)]
    lines.extend(f"{path}\ttoken={name}" for path, name in token_markers(root))
    return "\n".join(lines)


def render_output(root: Node, output: str, indent: int | None = None) -> str:
    """Render the transformed tree in the requested output format."""
    if output == "tokens":
        return format_token_report(root)
    if output == "json":
        return JSONStrategy(indent=indent).render(root)

    strategy = registry.get(output)
    if strategy is None:
        raise ValueError(f"Unknown output format: {output}")
    return strategy.render(root)


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parsed = parse_args(args)
    setup_logging(parsed.verbose)

    try:
        content, filename = read_input(parsed.file)
    except FileNotFoundError:
        print(f"Error: File not found: {parsed.file}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error reading input: {e}", file=sys.stderr)
        return 1

    try:
        root = process(
            content,
            filename=filename,
            format_type=parsed.format_type,
            collapsible_types=parsed.collapsible_types,
        )
    except PreconditionViolation as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (TypeError, ValueError) as e:
        print(f"Error parsing input: {e}", file=sys.stderr)
        return 1

    try:
        output = render_output(root, parsed.output, indent=parsed.indent)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if output:
        print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
