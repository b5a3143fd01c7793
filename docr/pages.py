from __future__ import annotations

import datetime as dt
import html
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from markupsafe import Markup

from .config import Settings
from .content import Document, filename_timestamp, identifier_for
from .errors import InputError
from .markup import Converter
from .render import FEED_STYLESHEET, INDEX_TEMPLATE, PAGE_TEMPLATE, TemplateRenderer, write_text
from .utils import rfc1123_date

INDEX_IDENTIFIER = "index"
FEED_FILENAME = "rss.xml"


@dataclass(frozen=True)
class Page:
    identifier: str
    body: str
    timestamp: dt.datetime

    @property
    def filename(self) -> str:
        return f"{self.identifier}.html"


def page_timestamp(document: Document, identifier: str, timestamps_from_filename: bool) -> dt.datetime:
    if timestamps_from_filename:
        parsed = filename_timestamp(identifier)
        if parsed is not None:
            return parsed
    return document.modified


def check_unique_identifiers(documents: Sequence[Document]) -> None:
    seen: dict[str, Path] = {}
    for document in documents:
        identifier = identifier_for(document.path)
        if identifier in seen:
            raise InputError(
                f"Duplicate page identifier {identifier!r}: {seen[identifier]} and {document.path}"
            )
        seen[identifier] = document.path


def build_pages(
    documents: Sequence[Document],
    converter: Converter,
    timestamps_from_filename: bool,
    workers: int = 1,
) -> tuple[Page, ...]:
    check_unique_identifiers(documents)

    def to_page(document: Document) -> Page:
        identifier = identifier_for(document.path)
        return Page(
            identifier=identifier,
            body=converter.convert(document.data),
            timestamp=page_timestamp(document, identifier, timestamps_from_filename),
        )

    workers = max(1, int(workers or 1))
    if workers <= 1 or len(documents) <= 1:
        return tuple(to_page(document) for document in documents)
    # map() yields in input order, so the collection keeps scan order.
    with ThreadPoolExecutor(max_workers=min(workers, len(documents))) as executor:
        return tuple(executor.map(to_page, documents))


def build_buttons(pages: Sequence[Page]) -> str:
    buttons = []
    for page in pages:
        if page.identifier == INDEX_IDENTIFIER:
            continue
        label = html.escape(page.identifier)
        href = html.escape(page.filename, quote=True)
        buttons.append(f'<a href="{href}" class="button">{label}</a>')
    return "".join(buttons)


def footer_year(pages: Sequence[Page], settings: Settings) -> str:
    if settings.footer_year:
        return settings.footer_year
    if pages:
        return str(max(page.timestamp for page in pages).year)
    return str(dt.datetime.now().year)


def site_binding(pages: Sequence[Page], settings: Settings) -> dict:
    return {
        "site_name": settings.site_name,
        "github_username": settings.github_username,
        "navbar": {"pages": list(pages)},
        "footer": {"year": footer_year(pages, settings)},
    }


def page_binding(page: Page, pages: Sequence[Page], settings: Settings) -> dict:
    binding = site_binding(pages, settings)
    binding.update(
        {
            "title": page.identifier,
            "content": Markup(page.body),
            "timestamp": page.timestamp,
            "modification_date": rfc1123_date(page.timestamp),
        }
    )
    return binding


def index_binding(
    readme_html: str, pages: Sequence[Page], settings: Settings, with_feed: Optional[bool] = None
) -> dict:
    if with_feed is None:
        with_feed = settings.enable_rss
    binding = site_binding(pages, settings)
    binding.update(
        {
            "readme_content": Markup(readme_html),
            "buttons": Markup(build_buttons(pages)),
            "feed_url": FEED_FILENAME if with_feed else None,
            "feed_stylesheet": FEED_STYLESHEET if with_feed else None,
        }
    )
    return binding


def render_page_files(
    renderer: TemplateRenderer,
    pages: Sequence[Page],
    settings: Settings,
    echo=print,
) -> list[tuple[str, str]]:
    rendered = []
    for page in pages:
        if page.identifier == INDEX_IDENTIFIER:
            # index.html belongs to the generated index page.
            echo(f"Skipped page: {page.filename} (reserved for the index)")
            continue
        rendered.append((page.filename, renderer.render(PAGE_TEMPLATE, page_binding(page, pages, settings))))
    return rendered


def render_index(
    renderer: TemplateRenderer,
    readme_html: str,
    pages: Sequence[Page],
    settings: Settings,
) -> str:
    return renderer.render(INDEX_TEMPLATE, index_binding(readme_html, pages, settings))


def write_page_files(output_dir: Path, rendered: Sequence[tuple[str, str]], echo=print) -> list[Path]:
    written = []
    for filename, html_doc in rendered:
        path = output_dir / filename
        write_text(path, html_doc)
        written.append(path)
        echo(f"Generated page: {filename}")
    return written
