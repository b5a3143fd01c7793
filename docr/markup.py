from __future__ import annotations

import html
from typing import Protocol
from xml.etree.ElementTree import Element

import markdown
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from .content import slugify
from .errors import ConversionError

UNSAFE_URL_SCHEMES = ("javascript:", "vbscript:", "file:", "data:")
SAFE_DATA_PREFIXES = ("data:image/png", "data:image/gif", "data:image/jpeg", "data:image/webp")
URL_ATTRIBUTES = ("href", "src")


class Converter(Protocol):
    def convert(self, data: bytes) -> str:
        ...


def is_unsafe_url(url: str) -> bool:
    # Browsers decode entities and ignore whitespace and control characters inside the scheme.
    value = "".join(ch for ch in html.unescape(url) if ch > " ").lower()
    if value.startswith(SAFE_DATA_PREFIXES):
        return False
    return value.startswith(UNSAFE_URL_SCHEMES)


class UnsafeUrlTreeprocessor(Treeprocessor):
    """Blank link and image destinations that would run script or read local files."""

    def run(self, root: Element) -> None:
        for element in root.iter():
            for attribute in URL_ATTRIBUTES:
                value = element.get(attribute)
                if value is not None and is_unsafe_url(value):
                    element.set(attribute, "")


class EscapeHtmlExtension(Extension):
    """Render raw HTML found in the source as text and blank unsafe link destinations."""

    def extendMarkdown(self, md: markdown.Markdown) -> None:
        md.preprocessors.deregister("html_block")
        md.inlinePatterns.deregister("html")
        # After inline links exist, before placeholders are unescaped.
        md.treeprocessors.register(UnsafeUrlTreeprocessor(md), "unsafe_url", 1)


def create_parser() -> markdown.Markdown:
    return markdown.Markdown(
        extensions=[
            "tables",
            "footnotes",
            "fenced_code",
            "nl2br",  # single newline -> <br />
            "toc",  # heading ids
            "pymdownx.magiclink",  # bare URLs
            "pymdownx.tilde",
            "pymdownx.tasklist",
            EscapeHtmlExtension(),
        ],
        extension_configs={
            "toc": {"slugify": slugify},
            "pymdownx.tilde": {"subscript": False},
        },
    )


class MarkdownConverter:
    def convert(self, data: bytes) -> str:
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ConversionError(f"Document is not valid UTF-8: {exc}") from exc
        # Parser state (toc ids, footnotes) is per document, so each call gets its own.
        md = create_parser()
        try:
            return md.convert(text)
        except Exception as exc:
            raise ConversionError(f"Markdown conversion failed: {exc}") from exc
