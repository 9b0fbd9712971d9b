"""CLI entrypoint for a full build run against the Prismic content API."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import TextIO

from dotenv import load_dotenv

from prismic_source.api.client import ContentApiError
from prismic_source.config import ConfigurationError, PluginOptions
from prismic_source.nodes.store import Node
from prismic_source.pipeline.build import BuildStats, source_nodes
from prismic_source.schema.compiler import TypeNameCollisionError
from prismic_source.schema.sdl import SdlTypeSink


LOGGER = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch and normalize every Prismic document")
    parser.add_argument("--nodes-out", default="prismic-nodes.jsonl", help="JSON lines file for emitted nodes")
    parser.add_argument("--sdl-out", default=None, help="Write the registered GraphQL SDL to this file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _node_writer(stream: TextIO):
    def _write(node: Node) -> None:
        stream.write(json.dumps(node, ensure_ascii=False, separators=(",", ":")))
        stream.write("\n")

    return _write


async def _run(options: PluginOptions, args: argparse.Namespace) -> BuildStats:
    sink = SdlTypeSink()
    nodes_path = Path(args.nodes_out)
    nodes_path.parent.mkdir(parents=True, exist_ok=True)
    with nodes_path.open("w", encoding="utf-8") as stream:
        stats = await source_nodes(options, sink, on_node=_node_writer(stream))

    if args.sdl_out:
        Path(args.sdl_out).write_text(sink.to_sdl(), encoding="utf-8")
    return stats


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        options = PluginOptions.from_env()
    except ConfigurationError as exc:
        LOGGER.error("%s", exc)
        return 2

    try:
        stats = asyncio.run(_run(options, args))
    except (ContentApiError, TypeNameCollisionError) as exc:
        print(json.dumps({"error": str(exc)}, ensure_ascii=True, indent=2))
        return 1

    print(json.dumps(stats.to_dict(), ensure_ascii=True, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
