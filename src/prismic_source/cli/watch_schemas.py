"""CLI entrypoint for recompiling the type-path artifact when schemas change."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from prismic_source.automation.compile_service import compile_schema_dir
from prismic_source.automation.watcher import SchemaFolderWatcher
from prismic_source.schema.compiler import TypeNameCollisionError
from prismic_source.schema.type_paths import default_type_paths_prefix


LOGGER = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Watch a schemas directory and recompile on change")
    parser.add_argument("--schemas-dir", default=os.environ.get("PRISMIC_SCHEMAS_DIR", "schemas"))
    parser.add_argument("--public-dir", default=os.environ.get("PRISMIC_PUBLIC_DIR", "public"))
    parser.add_argument("--repository-name", default=os.environ.get("PRISMIC_REPOSITORY_NAME", ""))
    parser.add_argument("--prefix", default=os.environ.get("PRISMIC_TYPE_PATHS_PREFIX", ""))
    parser.add_argument("--sdl-path", default=None, help="Also rewrite the GraphQL SDL to this file")
    parser.add_argument("--debounce", type=float, default=0.5, help="Debounce delay in seconds")
    return parser.parse_args(argv)


def _recompile(args: argparse.Namespace, prefix: str) -> None:
    try:
        result = compile_schema_dir(
            args.schemas_dir,
            public_dir=args.public_dir,
            prefix=prefix,
            sdl_path=args.sdl_path,
        )
    except (TypeNameCollisionError, ValueError) as exc:
        LOGGER.error("Schema compilation failed: %s", exc)
        return
    LOGGER.info("Wrote %s (%d type paths)", result.type_paths_file, result.type_paths)


async def _run_watcher(args: argparse.Namespace, prefix: str) -> int:
    schemas_dir = Path(args.schemas_dir)
    if not schemas_dir.is_dir():
        LOGGER.error("schemas-dir must exist and be a directory: %s", schemas_dir)
        return 2

    async def _on_change(changed: Path) -> None:
        LOGGER.info("Detected schema change: %s", changed.name)
        _recompile(args, prefix)

    _recompile(args, prefix)
    watcher = SchemaFolderWatcher(
        schemas_dir=schemas_dir,
        callback=_on_change,
        debounce_seconds=float(args.debounce),
    )
    await watcher.start()
    LOGGER.info("Watching %s (debounce %.1fs)", schemas_dir, float(args.debounce))

    try:
        while True:
            await asyncio.sleep(1.0)
    finally:
        watcher.stop()
        LOGGER.info("Watcher stopped cleanly")


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = _parse_args(argv)
    prefix = args.prefix or (default_type_paths_prefix(args.repository_name) if args.repository_name else "")
    if not prefix:
        LOGGER.error("Either --prefix or --repository-name is required")
        return 2
    try:
        return asyncio.run(_run_watcher(args, prefix))
    except KeyboardInterrupt:
        LOGGER.info("Shutdown requested")
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
