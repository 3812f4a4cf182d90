import importlib
import json
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from _factories import page, page_mention, paragraph, title_property

from notionsmith.ui.cli import app


render_module = importlib.import_module("notionsmith.ui.cli.commands.render")
export_module = importlib.import_module("notionsmith.ui.cli.commands.export")


class FakeClient:
    pages: list[dict[str, Any]] = []
    bodies: dict[str, list[dict[str, Any]]] = {}
    configs: list[Any] = []

    def __init__(self, config: Any = None) -> None:
        self.config = config
        FakeClient.configs.append(config)

    def retrieve_block(self, block_id: str) -> dict[str, Any]:
        return {"object": "page", "id": block_id}

    def list_children(self, block_id: str) -> list[dict[str, Any]]:
        return self.bodies.get(block_id, [])

    def query_database(self, database_id: str, *, filter=None, sorts=None) -> list[dict[str, Any]]:
        return self.pages


@pytest.fixture
def fake_client(monkeypatch: pytest.MonkeyPatch) -> type[FakeClient]:
    monkeypatch.setattr(FakeClient, "pages", [])
    monkeypatch.setattr(FakeClient, "bodies", {})
    monkeypatch.setattr(FakeClient, "configs", [])
    monkeypatch.setattr(render_module, "NotionClient", FakeClient)
    monkeypatch.setattr(export_module, "NotionClient", FakeClient)
    return FakeClient


def _write_json(path: Path, data: Any) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_render_json_file_to_stdout(tmp_path: Path) -> None:
    source = _write_json(tmp_path / "blocks.json", [paragraph("Hello World")])

    result = CliRunner().invoke(app, ["render", str(source)])

    assert result.exit_code == 0, result.output
    assert "<p>Hello World</p>" in result.stdout


def test_render_accepts_api_list_response(tmp_path: Path) -> None:
    source = _write_json(tmp_path / "blocks.json", {"results": [paragraph("Listed")]})

    result = CliRunner().invoke(app, ["render", str(source)])

    assert result.exit_code == 0, result.output
    assert "<p>Listed</p>" in result.stdout


def test_render_resolves_mentions_and_writes_file(tmp_path: Path) -> None:
    source = _write_json(tmp_path / "blocks.json", [paragraph(page_mention("abc-1", "Intro"))])
    resolution = _write_json(tmp_path / "slugs.json", {"abc1": "intro"})
    output = tmp_path / "out" / "page.html"

    result = CliRunner().invoke(
        app, ["render", str(source), "--resolution", str(resolution), "-o", str(output)]
    )

    assert result.exit_code == 0, result.output
    assert output.read_text(encoding="utf-8") == '<p><a href="/posts/intro/">Intro</a></p>'


def test_render_warns_about_unresolved_mentions(tmp_path: Path) -> None:
    source = _write_json(tmp_path / "blocks.json", [paragraph(page_mention("p9", "Lost"))])

    result = CliRunner().invoke(app, ["render", str(source)])

    assert result.exit_code == 0, result.output
    assert "Unresolved page mention: p9" in result.output


def test_render_standalone_page(tmp_path: Path) -> None:
    source = _write_json(tmp_path / "blocks.json", [paragraph("Body")])

    result = CliRunner().invoke(app, ["render", str(source), "--standalone", "--title", "Notes"])

    assert result.exit_code == 0, result.output
    assert result.stdout.startswith("<!DOCTYPE html>")
    assert '<h1 class="notion-page-title">Notes</h1>' in result.stdout
    assert "<p>Body</p>" in result.stdout


def test_render_can_drop_unsupported_comments(tmp_path: Path) -> None:
    blocks = [{"object": "block", "id": "u1", "type": "mystery", "mystery": {}}]
    source = _write_json(tmp_path / "blocks.json", blocks)

    with_comment = CliRunner().invoke(app, ["render", str(source)])
    without_comment = CliRunner().invoke(
        app, ["render", str(source), "--no-unsupported-comments"]
    )

    assert "<!-- Unsupported block type: mystery -->" in with_comment.stdout
    assert "Unsupported" not in without_comment.stdout


def test_render_reports_invalid_blocks(tmp_path: Path) -> None:
    source = _write_json(
        tmp_path / "blocks.json", [{"object": "block", "id": "x", "type": "paragraph"}]
    )

    result = CliRunner().invoke(app, ["render", str(source)])

    assert result.exit_code == 1
    assert "Failed to parse block: x (paragraph)" in result.output


def test_render_rejects_invalid_json(tmp_path: Path) -> None:
    source = tmp_path / "broken.json"
    source.write_text("{not json", encoding="utf-8")

    result = CliRunner().invoke(app, ["render", str(source)])

    assert result.exit_code == 2
    assert "JSON" in result.output


def test_render_page_id_requires_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NOTION_TOKEN", raising=False)

    result = CliRunner().invoke(app, ["render", "0123456789abcdef"])

    assert result.exit_code == 2
    assert "token" in result.output


def test_render_fetches_page_by_id(
    fake_client: type[FakeClient], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("NOTION_TOKEN", raising=False)
    fake_client.bodies = {"page-1": [paragraph("Fetched body")]}

    result = CliRunner().invoke(app, ["render", "page-1", "--token", "secret"])

    assert result.exit_code == 0, result.output
    assert "<p>Fetched body</p>" in result.stdout
    assert fake_client.configs[0].token == "secret"


def _write_schema(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    (tmp_path / "cli_export_schema.py").write_text(
        "from pydantic import Field\n"
        "from notionsmith.core.properties import PropertySchema, Title\n"
        "\n"
        "\n"
        "class Post(PropertySchema):\n"
        '    title: Title = Field(alias="Name")\n',
        encoding="utf-8",
    )
    monkeypatch.syspath_prepend(str(tmp_path))
    return "cli_export_schema:Post"


def test_export_writes_entries(
    tmp_path: Path, fake_client: type[FakeClient], monkeypatch: pytest.MonkeyPatch
) -> None:
    schema = _write_schema(tmp_path, monkeypatch)
    fake_client.pages = [
        page("p1", {"Name": title_property("Hello World")}),
        page("p2", {"Name": title_property("Second")}),
    ]
    fake_client.bodies = {
        "p1": [paragraph("See ", page_mention("p2", "next"))],
        "p2": [paragraph("Two")],
    }
    out = tmp_path / "site"

    result = CliRunner().invoke(
        app, ["export", "db", "--schema", schema, "-o", str(out), "--token", "secret"]
    )

    assert result.exit_code == 0, result.output
    assert "Exported 2/2 entries" in result.output
    assert (out / "hello-world.html").read_text(encoding="utf-8") == (
        '<p>See <a href="/posts/second/">next</a></p>'
    )
    assert (out / "second.html").read_text(encoding="utf-8") == "<p>Two</p>"
    manifest = json.loads((out / "entries.json").read_text(encoding="utf-8"))
    assert [item["slug"] for item in manifest] == ["hello-world", "second"]
    assert manifest[0]["properties"] == {"title": "Hello World"}


def test_export_standalone_pages_use_entry_title(
    tmp_path: Path, fake_client: type[FakeClient], monkeypatch: pytest.MonkeyPatch
) -> None:
    schema = _write_schema(tmp_path, monkeypatch)
    fake_client.pages = [page("p1", {"Name": title_property("Hello World")})]
    fake_client.bodies = {"p1": [paragraph("Body")]}
    out = tmp_path / "site"

    result = CliRunner().invoke(
        app,
        ["export", "db", "--schema", schema, "-o", str(out), "--token", "secret", "--standalone"],
    )

    assert result.exit_code == 0, result.output
    html = (out / "hello-world.html").read_text(encoding="utf-8")
    assert html.startswith("<!DOCTYPE html>")
    assert "<title>Hello World</title>" in html
    assert "<title>hello-world</title>" not in html


def test_export_aborts_on_metadata_errors(
    tmp_path: Path, fake_client: type[FakeClient], monkeypatch: pytest.MonkeyPatch
) -> None:
    schema = _write_schema(tmp_path, monkeypatch)
    fake_client.pages = [page("p1", {"Name": title_property("Fine")}), page("p2", {})]
    out = tmp_path / "site"

    result = CliRunner().invoke(
        app, ["export", "db", "--schema", schema, "-o", str(out), "--token", "secret"]
    )

    assert result.exit_code == 1
    assert "Failed to parse schema for page ID: p2" in result.output
    assert not (out / "entries.json").exists()


def test_export_lenient_records_failures(
    tmp_path: Path, fake_client: type[FakeClient], monkeypatch: pytest.MonkeyPatch
) -> None:
    schema = _write_schema(tmp_path, monkeypatch)
    fake_client.pages = [page("p1", {"Name": title_property("Fine")}), page("p2", {})]
    fake_client.bodies = {"p1": [paragraph("ok")]}
    out = tmp_path / "site"

    result = CliRunner().invoke(
        app,
        ["export", "db", "--schema", schema, "-o", str(out), "--token", "secret", "--lenient"],
    )

    assert result.exit_code == 1
    assert "Exported 1/2 entries" in result.output
    assert (out / "fine.html").exists()
    manifest = json.loads((out / "entries.json").read_text(encoding="utf-8"))
    assert manifest[1]["id"] == "p2"
    assert "metadata" in manifest[1]["errors"]


def test_export_rejects_unknown_schema(fake_client: type[FakeClient]) -> None:
    result = CliRunner().invoke(
        app, ["export", "db", "--schema", "no_such_module_here:Post", "--token", "secret"]
    )

    assert result.exit_code == 2
    assert "Cannot import module" in result.output
