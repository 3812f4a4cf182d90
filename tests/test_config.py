from pathlib import Path

import pytest

from notionsmith.core.config import (
    ClientConfig,
    ConfigError,
    NotionsmithConfig,
    RenderConfig,
    load_config,
)


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NOTION_TOKEN", raising=False)

    config = NotionsmithConfig()

    assert config.render.mention_href == "/posts/{slug}/"
    assert config.render.color_class_prefix == "notion-"
    assert config.render.unsupported_comments is True
    assert config.client.token is None
    assert config.client.api_version == "2022-06-28"
    assert config.client.page_size == 100
    assert config.strict_metadata is True


def test_token_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NOTION_TOKEN", "secret_env")

    assert ClientConfig().token == "secret_env"
    assert ClientConfig(token="explicit").token == "explicit"


def test_mention_href_requires_placeholder() -> None:
    with pytest.raises(ValueError, match="slug"):
        RenderConfig(mention_href="/posts/")

    assert RenderConfig(mention_href="/blog/{slug}.html").href_for("intro") == "/blog/intro.html"


@pytest.mark.parametrize(
    "template",
    [
        "/posts/{slug}/?from={source}",
        "/posts/{}/",
        "/posts/{slug}/{0}",
        "/posts/{slug.upper}/",
        "/posts/{slug!r}/",
        "/posts/{slug:>10}/",
        "/posts/{slug",
    ],
)
def test_mention_href_rejects_other_fields(template: str) -> None:
    with pytest.raises(ValueError, match="mention_href"):
        RenderConfig(mention_href=template)


def test_mention_href_keeps_escaped_braces() -> None:
    config = RenderConfig(mention_href="/posts/{slug}/?q={{raw}}")

    assert config.href_for("my-slug") == "/posts/my-slug/?q={raw}"


def test_extra_template_fields_fail_when_loading(tmp_path: Path) -> None:
    path = tmp_path / "notionsmith.yml"
    path.write_text('render:\n  mention_href: "/posts/{slug}/?from={source}"\n', encoding="utf-8")

    with pytest.raises(ConfigError, match="source"):
        load_config(path)


def test_page_size_is_capped() -> None:
    with pytest.raises(ValueError):
        ClientConfig(page_size=500)


def test_load_config_from_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NOTION_TOKEN", raising=False)
    path = tmp_path / "notionsmith.yml"
    path.write_text(
        "render:\n"
        "  mention_href: /notes/{slug}/\n"
        "  unsupported_comments: false\n"
        "client:\n"
        "  max_workers: 2\n"
        "strict_metadata: false\n",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.render.mention_href == "/notes/{slug}/"
    assert config.render.unsupported_comments is False
    assert config.client.max_workers == 2
    assert config.strict_metadata is False


def test_overrides_merge_into_nested_sections(tmp_path: Path) -> None:
    path = tmp_path / "notionsmith.yml"
    path.write_text("render:\n  color_class_prefix: c-\n", encoding="utf-8")

    config = load_config(
        path, render={"unsupported_comments": False}, client={"token": "abc"}, strict_metadata=None
    )

    assert config.render.color_class_prefix == "c-"
    assert config.render.unsupported_comments is False
    assert config.client.token == "abc"
    assert config.strict_metadata is True


def test_load_config_without_file() -> None:
    assert load_config().render == RenderConfig()


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("render: [unclosed", "Invalid YAML"),
        ("- just\n- a list\n", "must contain a mapping"),
        ("render:\n  unknown_option: 1\n", "Invalid configuration"),
    ],
)
def test_load_config_errors(tmp_path: Path, content: str, message: str) -> None:
    path = tmp_path / "broken.yml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError, match=message):
        load_config(path)


def test_missing_file_is_reported(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Failed to read"):
        load_config(tmp_path / "absent.yml")
