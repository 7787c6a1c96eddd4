"""Command-line interface for htmlgen."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

import yaml
from jinja2 import TemplateError

from .config import RenderConfig, load_config
from .errors import RenderError
from .nodes import Document, Node
from .sinks import render_bytes, render_chunks
from .templating import TemplateLibrary
from .tree_loader import load_tree
from .util_fs import write_bytes

VERSION = "0.1.0"


def _resolve_config(args: argparse.Namespace) -> RenderConfig:
    overrides = {}
    if getattr(args, "pretty", False):
        overrides["mode"] = "pretty"
    if getattr(args, "chunk_size", None) is not None:
        overrides["chunk_size"] = args.chunk_size
    if args.config:
        config_path = Path(args.config)
        try:
            return load_config(config_path, overrides)
        except yaml.YAMLError as exc:
            raise SystemExit(f"Invalid config file {config_path}: {exc}") from exc
    return RenderConfig.coerce(overrides)


def _load_page(args: argparse.Namespace) -> Node:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Page file not found: {input_path}")
    templates = TemplateLibrary(Path(args.templates)) if args.templates else None
    try:
        node = load_tree(input_path, templates=templates)
    except (ValueError, yaml.YAMLError) as exc:
        raise SystemExit(f"Invalid page file {input_path}: {exc}") from exc
    except TemplateError as exc:
        raise SystemExit(f"Template error in {input_path}: {exc}") from exc
    if getattr(args, "document", False) and not isinstance(node, Document):
        node = Document(body=node)
    return node


def _handle_render(args: argparse.Namespace) -> None:
    try:
        config = _resolve_config(args)
        output = render_bytes(_load_page(args), config)
    except RenderError as exc:
        raise SystemExit(str(exc)) from exc

    if args.output:
        path = write_bytes(Path(args.output), output)
        print(f"Wrote {len(output)} bytes to {path}.", file=sys.stderr)
    else:
        sys.stdout.buffer.write(output)
        sys.stdout.buffer.flush()


async def _stream_to_stdout(node: Node, config: RenderConfig) -> int:
    count = 0
    async for chunk in render_chunks(node, config):
        sys.stdout.buffer.write(chunk)
        sys.stdout.buffer.flush()
        count += 1
    return count


def _handle_stream(args: argparse.Namespace) -> None:
    try:
        config = _resolve_config(args)
        count = asyncio.run(_stream_to_stdout(_load_page(args), config))
    except RenderError as exc:
        raise SystemExit(str(exc)) from exc
    print(f"Streamed {count} chunk(s).", file=sys.stderr)


def _add_page_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--in",
        dest="input",
        required=True,
        help="Path to a YAML or JSON page description.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional YAML file with render options.",
    )
    parser.add_argument(
        "--templates",
        default=None,
        help="Directory used to resolve template_file nodes.",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Pretty-print the output regardless of the configured mode.",
    )
    parser.add_argument(
        "--document",
        action="store_true",
        help="Wrap the page in a full document skeleton with a generated stylesheet.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="htmlgen",
        description="Render node trees to HTML",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"htmlgen {VERSION}",
        help="Show the htmlgen version and exit.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log rendering details to stderr.",
    )

    subparsers = parser.add_subparsers(dest="command")

    render_parser = subparsers.add_parser(
        "render",
        help="Render a page description to HTML.",
        description="Load a page description and write the rendered bytes.",
    )
    _add_page_arguments(render_parser)
    render_parser.add_argument(
        "--out",
        dest="output",
        default=None,
        help="File to write; defaults to stdout.",
    )
    render_parser.set_defaults(func=_handle_render)

    stream_parser = subparsers.add_parser(
        "stream",
        help="Render a page through the chunked asynchronous sink.",
        description="Write rendered chunks to stdout as they are produced.",
    )
    _add_page_arguments(stream_parser)
    stream_parser.add_argument(
        "--chunk-size",
        dest="chunk_size",
        type=int,
        default=None,
        help="Bytes buffered before a chunk is emitted.",
    )
    stream_parser.set_defaults(func=_handle_stream)

    return parser


def main(argv: Optional[Iterable[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


__all__ = ["build_parser", "main"]


if __name__ == "__main__":
    main()
