from __future__ import annotations

from pathlib import Path

import pytest

from docr.config import ENV_BINDINGS, Settings

PAGE_TEMPLATE = (
    "<title>{{ title }} | {{ site_name }}</title>\n"
    "<nav>{% for page in navbar.pages %}<a href=\"{{ page.identifier }}.html\">{{ page.identifier }}</a>{% endfor %}</nav>\n"
    "<p class=\"modified\">{{ modification_date }}</p>\n"
    "<article>{{ content }}</article>\n"
    "<footer>{{ footer.year }} {{ github_username }}</footer>\n"
)

INDEX_TEMPLATE = (
    "<title>{{ site_name }}</title>\n"
    "{% if feed_url %}<link rel=\"alternate\" href=\"{{ feed_url }}\">{% endif %}\n"
    "<main>{{ readme_content }}</main>\n"
    "<div class=\"buttons\">{{ buttons }}</div>\n"
    "<footer>{{ footer.year }} {{ github_username }}</footer>\n"
)


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for env_name in ENV_BINDINGS.values():
        monkeypatch.delenv(env_name, raising=False)
    return monkeypatch


@pytest.fixture
def site(tmp_path, monkeypatch) -> Settings:
    """A small content tree and template directory rooted at the working directory."""
    monkeypatch.chdir(tmp_path)
    write(tmp_path / "markdown" / "README.md", "# Welcome\n\nThis is the overview.\n")
    write(tmp_path / "markdown" / "alpha.md", "# Alpha\n\nFirst page.\n")
    write(tmp_path / "markdown" / "beta.md", "# Beta\n\nSecond page.\n")
    write(tmp_path / "markdown" / "nested" / "gamma.md", "# Gamma\n\nThird page.\n")
    write(tmp_path / "markdown" / "notes.txt", "not markdown\n")
    write(tmp_path / "templates" / "page.html", PAGE_TEMPLATE)
    write(tmp_path / "templates" / "index.html", INDEX_TEMPLATE)
    write(tmp_path / "templates" / "css" / "style.css", "body { color: black; }\n")
    write(tmp_path / "templates" / "js" / "main.js", "console.log('hi');\n")
    write(tmp_path / "templates" / "pretty-feed-v3.xsl", "<xsl:stylesheet/>\n")
    return Settings(
        site_name="Test Site",
        github_username="octocat",
        site_url="https://example.com",
        site_description="A test site",
        markdown_dir=Path("markdown"),
        template_dir=Path("templates"),
        output_dir=Path("public"),
    )
