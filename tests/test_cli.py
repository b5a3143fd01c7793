"""End-to-end tests for the build pipeline and the command-line entry point."""

from __future__ import annotations

import json
import re
import xml.etree.ElementTree as etree
from pathlib import Path

import pytest

from docr.cli import build_site, main, parse_args
from docr.errors import ConversionError, InputError, RenderError

BUTTON_RE = re.compile(r'<a href="([^"]+)" class="button">')


def output_files(root: Path) -> dict[str, bytes]:
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


# ============================================================
# build_site
# ============================================================


class TestBuildSite:
    def test_writes_pages_index_feed_and_assets(self, site):
        result = build_site(site, quiet=True)
        out = Path("public")
        assert [page.identifier for page in result.pages] == ["alpha", "beta", "gamma"]
        for name in ["alpha.html", "beta.html", "gamma.html", "index.html", "rss.xml"]:
            assert (out / name).is_file(), name
        assert (out / "css" / "style.css").read_text(encoding="utf-8") == "body { color: black; }\n"
        assert (out / "js" / "main.js").is_file()
        assert (out / "pretty-feed-v3.xsl").is_file()
        assert result.feed == out / "rss.xml"

    def test_overview_is_index_body_not_a_page(self, site):
        build_site(site, quiet=True)
        out = Path("public")
        assert not (out / "README.html").exists()
        index = (out / "index.html").read_text(encoding="utf-8")
        assert '<h1 id="welcome">Welcome</h1>' in index
        assert "README" not in index

    def test_index_buttons_follow_page_order(self, site):
        build_site(site, quiet=True)
        index = Path("public/index.html").read_text(encoding="utf-8")
        assert BUTTON_RE.findall(index) == ["alpha.html", "beta.html", "gamma.html"]
        assert '<link rel="alternate" href="rss.xml">' in index

    def test_page_has_navigation_and_site_fields(self, site):
        build_site(site, quiet=True)
        html = Path("public/beta.html").read_text(encoding="utf-8")
        assert "<title>beta | Test Site</title>" in html
        assert '<h1 id="beta">Beta</h1>' in html
        for name in ["alpha", "beta", "gamma"]:
            assert f'<a href="{name}.html">{name}</a>' in html
        assert "octocat" in html

    def test_feed_projects_every_page(self, site):
        result = build_site(site, quiet=True)
        root = etree.fromstring(Path("public/rss.xml").read_bytes())
        items = root.findall("./channel/item")
        assert len(items) == len(result.pages)
        assert [item.findtext("link") for item in items] == [f"{p.identifier}.html" for p in result.pages]
        assert root.findtext("./channel/link") == "https://example.com"

    def test_rebuild_is_byte_identical(self, site):
        build_site(site, quiet=True)
        first = output_files(Path("public"))
        build_site(site, quiet=True)
        assert output_files(Path("public")) == first

    def test_filename_timestamps(self, site, tmp_path):
        (tmp_path / "markdown" / "25-12-2023.md").write_text("Holiday\n", encoding="utf-8")
        result = build_site(site.with_overrides(timestamps_from_filename=True), quiet=True)
        dated = [page for page in result.pages if page.identifier == "25-12-2023"][0]
        assert dated.timestamp.date().isoformat() == "2023-12-25"
        assert "Mon, 25 Dec 2023 00:00:00 +0000" in Path("public/rss.xml").read_text(encoding="utf-8")

    def test_feed_disabled(self, site):
        build_site(site.with_overrides(enable_rss=False), quiet=True)
        assert not Path("public/rss.xml").exists()
        assert "rss.xml" not in Path("public/index.html").read_text(encoding="utf-8")

    def test_index_document_does_not_replace_index_page(self, site, tmp_path):
        (tmp_path / "markdown" / "index.md").write_text("# Index page\n", encoding="utf-8")
        result = build_site(site, quiet=True)
        assert "index" in [page.identifier for page in result.pages]
        index = Path("public/index.html").read_text(encoding="utf-8")
        assert "Welcome" in index
        assert "index.html" not in BUTTON_RE.findall(index)

    def test_builtin_templates(self, site, tmp_path):
        settings = site.with_overrides(builtin_templates=True, template_dir=str(tmp_path / "none"))
        build_site(settings, quiet=True)
        html = Path("public/alpha.html").read_text(encoding="utf-8")
        assert html.startswith("<!DOCTYPE html>")
        assert "First page." in html

    def test_workers_produce_same_output(self, site):
        build_site(site, quiet=True)
        single = output_files(Path("public"))
        build_site(site.with_overrides(build_workers=4), quiet=True)
        assert output_files(Path("public")) == single

    def test_clean_removes_stale_files(self, site):
        stale = Path("public/old.html")
        stale.parent.mkdir()
        stale.write_text("old", encoding="utf-8")
        build_site(site.with_overrides(clean=True), quiet=True)
        assert not stale.exists()
        assert Path("public/alpha.html").exists()

    def test_without_clean_existing_files_remain(self, site):
        stale = Path("public/old.html")
        stale.parent.mkdir()
        stale.write_text("old", encoding="utf-8")
        build_site(site, quiet=True)
        assert stale.exists()

    def test_progress_output(self, site, capsys):
        build_site(site)
        out = capsys.readouterr().out
        assert "Generated page: alpha.html" in out
        assert "Generated page: index.html" in out
        assert "Generated feed: rss.xml" in out


# ============================================================
# Fatal errors leave no output behind
# ============================================================


class TestFatalErrors:
    def test_missing_overview(self, site, tmp_path):
        (tmp_path / "markdown" / "README.md").unlink()
        with pytest.raises(InputError, match="README.md"):
            build_site(site, quiet=True)
        assert not Path("public").exists()

    def test_missing_markdown_dir(self, site):
        with pytest.raises(InputError):
            build_site(site.with_overrides(markdown_dir="nowhere"), quiet=True)
        assert not Path("public").exists()

    def test_duplicate_identifiers(self, site, tmp_path):
        (tmp_path / "markdown" / "nested" / "alpha.md").write_text("dup\n", encoding="utf-8")
        with pytest.raises(InputError, match="alpha"):
            build_site(site, quiet=True)
        assert not Path("public").exists()

    def test_conversion_failure(self, site, tmp_path):
        (tmp_path / "markdown" / "broken.md").write_bytes(b"\xff\xfe\xfa")
        with pytest.raises(ConversionError):
            build_site(site, quiet=True)
        assert not Path("public").exists()

    def test_template_failure(self, site, tmp_path):
        (tmp_path / "templates" / "page.html").write_text("{{ no_such_field }}", encoding="utf-8")
        with pytest.raises(RenderError):
            build_site(site, quiet=True)
        assert not Path("public").exists()

    def test_missing_index_template(self, site, tmp_path):
        (tmp_path / "templates" / "index.html").unlink()
        with pytest.raises(RenderError, match="index.html"):
            build_site(site, quiet=True)
        assert not Path("public").exists()

    def test_template_failure_keeps_previous_output(self, site, tmp_path):
        build_site(site, quiet=True)
        before = output_files(Path("public"))
        (tmp_path / "templates" / "index.html").write_text("{{ no_such_field }}", encoding="utf-8")
        with pytest.raises(RenderError):
            build_site(site.with_overrides(clean=True), quiet=True)
        assert output_files(Path("public")) == before


# ============================================================
# Command line
# ============================================================


def test_parse_args_precedence(site, tmp_path, monkeypatch):
    Path("settings.json").write_text(
        json.dumps({"websiteName": "File Name", "site_url": "https://file", "outputDir": "from-file"}),
        encoding="utf-8",
    )
    monkeypatch.setenv("DOCR_WEBSITE_URL", "https://env")
    monkeypatch.setenv("DOCR_OUTPUT_DIR", "from-env")
    args, settings = parse_args(["--output-dir", "from-cli", "--no-enable-rss"])
    assert settings.site_name == "File Name"
    assert settings.site_url == "https://env"
    assert settings.output_dir == Path("from-cli")
    assert settings.enable_rss is False
    assert args.quiet is False


def test_main_builds_site(site, capsys):
    Path("settings.json").write_text(
        json.dumps({"site_name": "Cli Site", "github_username": "octocat"}), encoding="utf-8"
    )
    main([])
    out = capsys.readouterr().out
    assert "Build completed in" in out
    assert Path("public/index.html").is_file()
    assert "<title>Cli Site</title>" in Path("public/index.html").read_text(encoding="utf-8")


def test_main_quiet(site, capsys):
    main(["--quiet", "--config", "missing.json"])
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Config file not found" in captured.err


def test_main_exits_nonzero_on_error(site, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--markdown-dir", "nowhere"])
    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert err.strip().splitlines()[-1].startswith("docr: error: ")
    assert "nowhere" in err


def test_main_reports_bad_config(site, capsys):
    Path("settings.json").write_text("{broken", encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 1
    assert "Invalid JSON" in capsys.readouterr().err
