"""Tests for tananoni.pages.types — immutable page and asset descriptors."""

import dataclasses

import pytest

from tananoni.pages.types import DEFAULT_VIEWPORT, Asset, HtmlPage, Link, MountPoint, Script, ScriptOnly


class TestHtmlPageDefaults:
    def test_defaults(self) -> None:
        page = HtmlPage("src/main.tsx")

        assert page.entry_point == "src/main.tsx"
        assert page.mount_points == ()
        assert page.scripts == ()
        assert page.links == ()
        assert page.title == ""
        assert page.html_name == "index.html"
        assert page.lang == "en"
        assert page.viewport == DEFAULT_VIEWPORT
        assert page.global_css is None
        assert page.hot_reload is False

    def test_frozen(self) -> None:
        page = HtmlPage("src/main.tsx")
        with pytest.raises(dataclasses.FrozenInstanceError):
            page.title = "changed"  # type: ignore[misc]


class TestChaining:
    def test_with_returns_new_page(self) -> None:
        page = HtmlPage("src/main.tsx")
        titled = page.with_title("index")

        assert titled is not page
        assert titled.title == "index"
        assert page.title == ""

    def test_full_chain(self) -> None:
        page = (
            HtmlPage("src/hello.tsx")
            .with_mount_point(MountPoint("main", "mount"))
            .with_script(Script("hello.js"))
            .with_title("hello")
            .with_html_name("hello.html")
            .with_link(Link("icon", "favicon.ico"))
            .with_lang("ja")
            .with_hot_reload()
        )

        assert page.mount_points == (MountPoint("main", "mount"),)
        assert page.scripts == (Script("hello.js"),)
        assert page.html_name == "hello.html"
        assert page.links == (Link("icon", "favicon.ico"),)
        assert page.lang == "ja"
        assert page.hot_reload is True

    def test_with_links_replaces(self) -> None:
        page = HtmlPage("a.tsx").with_link(Link("icon", "a.ico"))
        page = page.with_links([Link("stylesheet", "b.css")])
        assert page.links == (Link("stylesheet", "b.css"),)

    def test_then_passes_page_through(self) -> None:
        page = HtmlPage("a.tsx").then(lambda p: p.with_title("from then"))
        assert page.title == "from then"

    def test_global_css_can_be_removed(self) -> None:
        page = HtmlPage("a.tsx").with_global_css("body{}").with_global_css(None)
        assert page.global_css is None


class TestScriptAndAsset:
    def test_script_defaults_to_classic(self) -> None:
        assert Script("main.js").kind == "normal"

    def test_script_only_has_entry_point(self) -> None:
        assert ScriptOnly("src/worker.ts").entry_point == "src/worker.ts"

    def test_asset_target_defaults_to_basename(self) -> None:
        assert Asset("static/icon.png").target == "icon.png"

    def test_asset_target_uses_alias(self) -> None:
        assert Asset("static/icon.png", "img/app-icon.png").target == "img/app-icon.png"

    def test_asset_directory_basename(self) -> None:
        assert Asset("public/fonts/").target == "fonts"
