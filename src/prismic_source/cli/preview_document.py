"""CLI entrypoint for previewing a single document by token and id."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

from prismic_source.config import ConfigurationError, PluginOptions, load_schemas_dir
from prismic_source.pipeline.merge import merge_preview_data
from prismic_source.pipeline.preview import PreviewError, PreviewSession, load_preview_json
from prismic_source.schema.type_paths import schemas_digest


LOGGER = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Preview one Prismic document")
    parser.add_argument("--token", required=True, help="Preview ref token")
    parser.add_argument("--document-id", required=True, help="Prismic id of the previewed document")
    digest = parser.add_mutually_exclusive_group(required=True)
    digest.add_argument("--digest", help="Schema digest the site was built with")
    digest.add_argument("--schemas-dir", help="Schema directory to derive the digest from")
    parser.add_argument(
        "--type-paths-source",
        default=None,
        help="Base URL or directory serving the type-path artifact (default: public dir)",
    )
    parser.add_argument("--static-data", default=None, help="JSON file of static page data to merge into")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = _parse_args(argv)

    try:
        options = PluginOptions.from_env(require_schemas=False)
        digest = args.digest or schemas_digest(load_schemas_dir(args.schemas_dir))
    except ConfigurationError as exc:
        LOGGER.error("%s", exc)
        return 2

    try:
        session = PreviewSession(
            options,
            schemas_digest=digest,
            token=args.token,
            document_id=args.document_id,
            type_paths_source=args.type_paths_source or options.public_dir,
        )
        result = asyncio.run(session.run())
        payload = result.to_dict()
        if args.static_data:
            static_data = load_preview_json(Path(args.static_data).read_text(encoding="utf-8"))
            payload["merged"] = merge_preview_data(static_data, result.preview_data)
    except (PreviewError, OSError) as exc:
        print(json.dumps({"error": str(exc)}, ensure_ascii=True, indent=2))
        return 1

    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
