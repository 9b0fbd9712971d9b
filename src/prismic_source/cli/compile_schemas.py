"""CLI entrypoint for compiling custom type schemas into the type-path artifact."""

from __future__ import annotations

import argparse
import json
import logging
import os

from dotenv import load_dotenv

from prismic_source.automation.compile_service import compile_schema_dir
from prismic_source.schema.compiler import TypeNameCollisionError
from prismic_source.schema.type_paths import default_type_paths_prefix


LOGGER = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compile Prismic custom type schemas")
    parser.add_argument(
        "--schemas-dir",
        default=os.environ.get("PRISMIC_SCHEMAS_DIR", "schemas"),
        help="Directory of <custom-type-id>.json schema files",
    )
    parser.add_argument(
        "--public-dir",
        default=os.environ.get("PRISMIC_PUBLIC_DIR", "public"),
        help="Directory the type-path artifact is written to",
    )
    parser.add_argument(
        "--repository-name",
        default=os.environ.get("PRISMIC_REPOSITORY_NAME", ""),
        help="Prismic repository name, used for the default artifact prefix",
    )
    parser.add_argument("--prefix", default=os.environ.get("PRISMIC_TYPE_PATHS_PREFIX", ""), help="Artifact file prefix")
    parser.add_argument("--sdl-path", default=None, help="Also write the GraphQL SDL to this file")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = _parse_args(argv)

    prefix = args.prefix
    if not prefix:
        if not args.repository_name:
            LOGGER.error("Either --prefix or --repository-name is required")
            return 2
        prefix = default_type_paths_prefix(args.repository_name)

    try:
        result = compile_schema_dir(
            args.schemas_dir,
            public_dir=args.public_dir,
            prefix=prefix,
            sdl_path=args.sdl_path,
        )
    except (TypeNameCollisionError, ValueError) as exc:
        print(json.dumps({"error": str(exc)}, ensure_ascii=True, indent=2))
        return 1

    print(json.dumps(result.to_dict(), ensure_ascii=True, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
