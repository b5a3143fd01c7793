from __future__ import annotations

import shutil
import sys
from pathlib import Path
from typing import Mapping

from jinja2 import (
    BaseLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    select_autoescape,
)

from .errors import OutputError, RenderError

PAGE_TEMPLATE = "page.html"
INDEX_TEMPLATE = "index.html"
FEED_STYLESHEET = "pretty-feed-v3.xsl"
ASSET_DIRS = ("css", "js")

_NAVBAR = """<nav class="navbar">
<a href="index.html" class="brand">{{ site_name }}</a>
{% for page in navbar.pages %}<a href="{{ page.identifier }}.html">{{ page.identifier }}</a>
{% endfor %}</nav>"""

_FOOTER = """<footer>
<p>&copy; {{ footer.year }} {{ site_name }}{% if github_username %} &middot; <a href="https://github.com/{{ github_username }}">@{{ github_username }}</a>{% endif %}</p>
</footer>"""

DEFAULT_TEMPLATES = {
    PAGE_TEMPLATE: """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{{ title }} | {{ site_name }}</title>
<link rel="stylesheet" href="css/style.css">
</head>
<body>
""" + _NAVBAR + """
<main>
<article>
<h1>{{ title }}</h1>
<p class="modified">{{ modification_date }}</p>
{{ content }}
</article>
</main>
""" + _FOOTER + """
</body>
</html>
""",
    INDEX_TEMPLATE: """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{{ site_name }}</title>
<link rel="stylesheet" href="css/style.css">
{% if feed_url %}<link rel="alternate" type="application/rss+xml" title="{{ site_name }}" href="{{ feed_url }}">
{% endif %}</head>
<body>
""" + _NAVBAR + """
<main>
{{ readme_content }}
<div class="buttons">{{ buttons }}</div>
{% if feed_url %}<p class="feed"><a href="{{ feed_url }}">RSS</a></p>
{% endif %}</main>
""" + _FOOTER + """
</body>
</html>
""",
}


class TemplateRenderer:
    def __init__(self, loader: BaseLoader) -> None:
        self.env = Environment(
            loader=loader,
            autoescape=select_autoescape(["html", "htm", "xml"]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )

    @classmethod
    def from_directory(cls, template_dir: Path) -> "TemplateRenderer":
        return cls(FileSystemLoader(str(template_dir)))

    @classmethod
    def from_mapping(cls, templates: Mapping[str, str]) -> "TemplateRenderer":
        return cls(DictLoader(dict(templates)))

    def render(self, name: str, binding: Mapping[str, object]) -> str:
        try:
            template = self.env.get_template(name)
            return template.render(**binding)
        except TemplateError as exc:
            raise RenderError(f"Cannot render template {name}: {exc}") from exc


def write_text(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise OutputError(f"Cannot write {path}: {exc}") from exc


def copy_static_assets(template_dir: Path, output_dir: Path) -> list[Path]:
    copied = []
    try:
        for name in ASSET_DIRS:
            source = template_dir / name
            if not source.is_dir():
                print(f"No {name} directory in {template_dir}, skipping.", file=sys.stderr)
                continue
            dest = output_dir / name
            if dest.exists():
                shutil.rmtree(dest)
            shutil.copytree(source, dest)
            copied.append(dest)
        stylesheet = template_dir / FEED_STYLESHEET
        if stylesheet.is_file():
            dest = output_dir / FEED_STYLESHEET
            shutil.copy2(stylesheet, dest)
            copied.append(dest)
        else:
            print(f"No {FEED_STYLESHEET} in {template_dir}, skipping.", file=sys.stderr)
    except OSError as exc:
        raise OutputError(f"Cannot copy static assets: {exc}") from exc
    return copied
