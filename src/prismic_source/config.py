"""Validated runtime options for build and preview runs."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import os
from pathlib import Path
from typing import Any, Mapping

from prismic_source.normalization.context import (
    Hooks,
    HtmlSerializerFactory,
    ImagePredicate,
    LinkResolverFactory,
    always_normalize_image,
    no_html_serializer,
    no_link_resolver,
)
from prismic_source.schema.type_paths import default_type_paths_prefix


DEFAULT_LANG = "*"
DEFAULT_CONCURRENT_FILE_REQUESTS = 20
DEFAULT_PUBLIC_DIR = "public"
DEFAULT_CACHE_DIR = ".cache/prismic-source"
API_ENDPOINT_TEMPLATE = "https://{repository_name}.cdn.prismic.io/api/v2"


@dataclass(slots=True)
class ConfigurationError(ValueError):
    """Options are missing or malformed; nothing may run."""

    errors: list[str]

    def __str__(self) -> str:
        return "Invalid options: " + ", ".join(self.errors)


@dataclass(frozen=True, slots=True)
class PluginOptions:
    repository_name: str
    access_token: str
    schemas: Mapping[str, Any] = field(default_factory=dict)
    lang: str = DEFAULT_LANG
    fetch_links: tuple[str, ...] = ()
    link_resolver: LinkResolverFactory = no_link_resolver
    html_serializer: HtmlSerializerFactory = no_html_serializer
    should_normalize_image: ImagePredicate = always_normalize_image
    concurrent_file_requests: int = DEFAULT_CONCURRENT_FILE_REQUESTS
    type_paths_filename_prefix: str = ""
    public_dir: Path = Path(DEFAULT_PUBLIC_DIR)
    cache_dir: Path = Path(DEFAULT_CACHE_DIR)
    api_endpoint: str = ""

    @property
    def hooks(self) -> Hooks:
        return Hooks(
            link_resolver=self.link_resolver,
            html_serializer=self.html_serializer,
            should_normalize_image=self.should_normalize_image,
        )

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        require_schemas: bool = True,
        **overrides: Any,
    ) -> "PluginOptions":
        """Read options from ``PRISMIC_*`` variables; keyword overrides win."""

        source: Mapping[str, str] = os.environ if environ is None else environ
        raw: dict[str, Any] = {
            "repository_name": source.get("PRISMIC_REPOSITORY_NAME", "").strip() or None,
            "access_token": source["PRISMIC_ACCESS_TOKEN"].strip() if "PRISMIC_ACCESS_TOKEN" in source else None,
        }

        optional_strings = {
            "lang": "PRISMIC_LANG",
            "type_paths_filename_prefix": "PRISMIC_TYPE_PATHS_PREFIX",
            "public_dir": "PRISMIC_PUBLIC_DIR",
            "cache_dir": "PRISMIC_CACHE_DIR",
            "api_endpoint": "PRISMIC_API_ENDPOINT",
        }
        for key, env_name in optional_strings.items():
            value = source.get(env_name, "").strip()
            if value:
                raw[key] = value

        fetch_links_raw = source.get("PRISMIC_FETCH_LINKS", "").strip()
        if fetch_links_raw:
            raw["fetch_links"] = [item.strip() for item in fetch_links_raw.split(",") if item.strip()]

        concurrency_raw = source.get("PRISMIC_CONCURRENT_FILE_REQUESTS", "").strip()
        if concurrency_raw:
            try:
                raw["concurrent_file_requests"] = int(concurrency_raw)
            except ValueError:
                raw["concurrent_file_requests"] = concurrency_raw

        schemas_dir = source.get("PRISMIC_SCHEMAS_DIR", "").strip()
        if schemas_dir and "schemas" not in overrides:
            raw["schemas"] = load_schemas_dir(schemas_dir)

        raw.update(overrides)
        return validate_plugin_options(raw, require_schemas=require_schemas)


def load_schemas_dir(path: str | Path) -> dict[str, Any]:
    """Load ``<custom-type-id>.json`` files from *path*, ordered by file name."""

    directory = Path(path)
    if not directory.is_dir():
        raise ConfigurationError([f"schemas directory does not exist: {directory}"])

    schemas: dict[str, Any] = {}
    errors: list[str] = []
    for schema_path in sorted(directory.glob("*.json")):
        try:
            schemas[schema_path.stem] = json.loads(schema_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            errors.append(f"schema file {schema_path.name} is unreadable: {exc}")
    if errors:
        raise ConfigurationError(errors)
    return schemas


def _non_empty_string(raw: Mapping[str, Any], key: str, errors: list[str]) -> str:
    value = raw.get(key)
    if not isinstance(value, str) or not value.strip():
        errors.append(f"{key} is a required field")
        return ""
    return value.strip()


def _hook(raw: Mapping[str, Any], key: str, default: Any, errors: list[str]) -> Any:
    value = raw.get(key)
    if value is None:
        return default
    if not callable(value):
        errors.append(f"{key} is not a function")
        return default
    return value


def validate_plugin_options(raw: Mapping[str, Any], *, require_schemas: bool = True) -> PluginOptions:
    """Validate raw options, reporting every problem at once."""

    errors: list[str] = []

    repository_name = _non_empty_string(raw, "repository_name", errors)
    # Public repositories use an empty token, but the option must be given.
    access_token = raw.get("access_token")
    if not isinstance(access_token, str):
        errors.append("access_token is a required field")
        access_token = ""

    schemas = raw.get("schemas")
    if schemas is None:
        if require_schemas:
            errors.append("schemas is a required field")
        schemas = {}
    elif not isinstance(schemas, Mapping):
        errors.append("schemas must be an object keyed by custom type id")
        schemas = {}
    else:
        for custom_type_id, schema in schemas.items():
            if not isinstance(custom_type_id, str) or not custom_type_id:
                errors.append("schemas keys must be non-empty custom type ids")
            elif not isinstance(schema, Mapping):
                errors.append(f"schemas.{custom_type_id} must be an object")

    lang = raw.get("lang", DEFAULT_LANG)
    if not isinstance(lang, str) or not lang.strip():
        errors.append("lang must be a non-empty string")
        lang = DEFAULT_LANG

    fetch_links = raw.get("fetch_links") or ()
    if isinstance(fetch_links, str) or not all(isinstance(item, str) and item for item in fetch_links):
        errors.append("fetch_links must be a list of non-empty strings")
        fetch_links = ()

    concurrency = raw.get("concurrent_file_requests", DEFAULT_CONCURRENT_FILE_REQUESTS)
    if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1:
        errors.append("concurrent_file_requests must be an integer >= 1")
        concurrency = DEFAULT_CONCURRENT_FILE_REQUESTS

    prefix = raw.get("type_paths_filename_prefix") or default_type_paths_prefix(repository_name)
    if not isinstance(prefix, str):
        errors.append("type_paths_filename_prefix must be a string")
        prefix = default_type_paths_prefix(repository_name)

    api_endpoint = raw.get("api_endpoint") or API_ENDPOINT_TEMPLATE.format(repository_name=repository_name)
    if not isinstance(api_endpoint, str) or not api_endpoint.startswith(("http://", "https://")):
        errors.append("api_endpoint must start with http:// or https://")
        api_endpoint = ""

    plugins = raw.get("plugins")
    if plugins:
        errors.append("plugins must be empty")

    link_resolver = _hook(raw, "link_resolver", no_link_resolver, errors)
    html_serializer = _hook(raw, "html_serializer", no_html_serializer, errors)
    should_normalize_image = _hook(raw, "should_normalize_image", always_normalize_image, errors)

    if errors:
        raise ConfigurationError(errors)

    return PluginOptions(
        repository_name=repository_name,
        access_token=access_token,
        schemas=schemas,
        lang=lang.strip(),
        fetch_links=tuple(fetch_links),
        link_resolver=link_resolver,
        html_serializer=html_serializer,
        should_normalize_image=should_normalize_image,
        concurrent_file_requests=concurrency,
        type_paths_filename_prefix=prefix,
        public_dir=Path(raw.get("public_dir") or DEFAULT_PUBLIC_DIR),
        cache_dir=Path(raw.get("cache_dir") or DEFAULT_CACHE_DIR),
        api_endpoint=api_endpoint.rstrip("/"),
    )
