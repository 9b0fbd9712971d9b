from __future__ import annotations

import json
from pathlib import Path

import pytest

from prismic_source.config import (
    ConfigurationError,
    PluginOptions,
    load_schemas_dir,
    validate_plugin_options,
)
from prismic_source.normalization.context import no_link_resolver


SCHEMAS = {"page": {"Main": {"title": {"type": "Text"}}}}


def test_defaults_are_applied() -> None:
    options = validate_plugin_options({"repository_name": "my-repo", "access_token": "t", "schemas": SCHEMAS})

    assert options.lang == "*"
    assert options.fetch_links == ()
    assert options.concurrent_file_requests == 20
    assert options.type_paths_filename_prefix == "prismic-typepaths---my-repo-"
    assert options.api_endpoint == "https://my-repo.cdn.prismic.io/api/v2"
    assert options.link_resolver is no_link_resolver
    assert options.hooks.link_resolver is no_link_resolver


def test_every_problem_is_reported_at_once() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        validate_plugin_options(
            {
                "fetch_links": "author.name",
                "concurrent_file_requests": 0,
                "link_resolver": "not callable",
                "plugins": ["x"],
            }
        )

    errors = excinfo.value.errors
    assert "repository_name is a required field" in errors
    assert "access_token is a required field" in errors
    assert "schemas is a required field" in errors
    assert "fetch_links must be a list of non-empty strings" in errors
    assert "concurrent_file_requests must be an integer >= 1" in errors
    assert "link_resolver is not a function" in errors
    assert "plugins must be empty" in errors
    assert isinstance(excinfo.value, ValueError)


def test_schemas_optional_for_preview() -> None:
    options = validate_plugin_options({"repository_name": "r", "access_token": "t"}, require_schemas=False)

    assert options.schemas == {}


def test_from_env_reads_prefixed_variables(tmp_path: Path) -> None:
    schemas_dir = tmp_path / "schemas"
    schemas_dir.mkdir()
    (schemas_dir / "page.json").write_text(json.dumps(SCHEMAS["page"]), encoding="utf-8")

    options = PluginOptions.from_env(
        {
            "PRISMIC_REPOSITORY_NAME": "my-repo",
            "PRISMIC_ACCESS_TOKEN": "secret",
            "PRISMIC_SCHEMAS_DIR": str(schemas_dir),
            "PRISMIC_LANG": "en-us",
            "PRISMIC_FETCH_LINKS": "author.name, category.title",
            "PRISMIC_CONCURRENT_FILE_REQUESTS": "5",
            "PRISMIC_PUBLIC_DIR": str(tmp_path / "public"),
        }
    )

    assert options.schemas == SCHEMAS
    assert options.lang == "en-us"
    assert options.fetch_links == ("author.name", "category.title")
    assert options.concurrent_file_requests == 5
    assert options.public_dir == tmp_path / "public"


def test_from_env_rejects_non_numeric_concurrency() -> None:
    with pytest.raises(ConfigurationError, match="concurrent_file_requests"):
        PluginOptions.from_env(
            {
                "PRISMIC_REPOSITORY_NAME": "r",
                "PRISMIC_ACCESS_TOKEN": "t",
                "PRISMIC_CONCURRENT_FILE_REQUESTS": "many",
            },
            require_schemas=False,
        )


def test_load_schemas_dir_reports_invalid_json(tmp_path: Path) -> None:
    (tmp_path / "page.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="page.json"):
        load_schemas_dir(tmp_path)

    with pytest.raises(ConfigurationError, match="does not exist"):
        load_schemas_dir(tmp_path / "missing")


def test_empty_access_token_is_allowed_for_public_repositories() -> None:
    options = validate_plugin_options({"repository_name": "r", "access_token": "", "schemas": SCHEMAS})

    assert options.access_token == ""
