from __future__ import annotations

import json
from pathlib import Path

from prismic_source.cli import source_nodes as source_nodes_cli
from prismic_source.pipeline.build import BuildStats


def test_cli_writes_nodes_and_prints_stats(tmp_path: Path, monkeypatch, capsys: object) -> None:
    schemas_dir = tmp_path / "schemas"
    schemas_dir.mkdir()
    (schemas_dir / "page.json").write_text(json.dumps({"Main": {"title": {"type": "Text"}}}), encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PRISMIC_REPOSITORY_NAME", "my-repo")
    monkeypatch.setenv("PRISMIC_ACCESS_TOKEN", "secret")
    monkeypatch.setenv("PRISMIC_SCHEMAS_DIR", str(schemas_dir))

    async def _fake_source_nodes(options, sink, *, on_node=None, **_kwargs):
        assert options.repository_name == "my-repo"
        on_node({"id": "n1", "internal": {"type": "PrismicPage", "contentDigest": "d"}})
        return BuildStats(documents=1, nodes=1)

    monkeypatch.setattr(source_nodes_cli, "source_nodes", _fake_source_nodes)
    nodes_out = tmp_path / "out" / "nodes.jsonl"

    exit_code = source_nodes_cli.main(["--nodes-out", str(nodes_out)])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert payload["documents"] == 1
    lines = nodes_out.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["id"] for line in lines] == ["n1"]


def test_cli_exits_with_configuration_error(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    for name in ("PRISMIC_REPOSITORY_NAME", "PRISMIC_ACCESS_TOKEN", "PRISMIC_SCHEMAS_DIR"):
        monkeypatch.delenv(name, raising=False)

    assert source_nodes_cli.main([]) == 2
