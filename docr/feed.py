from __future__ import annotations

import xml.etree.ElementTree as etree
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from .config import Settings
from .pages import FEED_FILENAME, Page
from .render import FEED_STYLESHEET, write_text
from .utils import rfc1123z_date

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


@dataclass(frozen=True)
class FeedItem:
    title: str
    link: str
    description: str
    pub_date: str


@dataclass(frozen=True)
class FeedChannel:
    title: str
    link: str
    description: str
    items: tuple[FeedItem, ...]


def build_channel(pages: Sequence[Page], settings: Settings) -> FeedChannel:
    items = tuple(
        FeedItem(
            title=page.identifier,
            link=page.filename,
            description=page.body,
            pub_date=rfc1123z_date(page.timestamp),
        )
        for page in pages
    )
    return FeedChannel(
        title=settings.site_name,
        link=settings.site_url,
        description=settings.site_description,
        items=items,
    )


def stylesheet_instruction(href: str) -> str:
    return f'<?xml-stylesheet href="{href}" type="text/xsl"?>'


def render_rss(channel: FeedChannel, stylesheet: Optional[str] = FEED_STYLESHEET) -> str:
    rss = etree.Element("rss", version="2.0")
    channel_el = etree.SubElement(rss, "channel")
    etree.SubElement(channel_el, "title").text = channel.title
    etree.SubElement(channel_el, "link").text = channel.link
    etree.SubElement(channel_el, "description").text = channel.description
    for item in channel.items:
        item_el = etree.SubElement(channel_el, "item")
        etree.SubElement(item_el, "title").text = item.title
        etree.SubElement(item_el, "link").text = item.link
        etree.SubElement(item_el, "description").text = item.description
        etree.SubElement(item_el, "pubDate").text = item.pub_date
    etree.indent(rss, space="  ")
    lines = [XML_DECLARATION]
    if stylesheet:
        lines.append(stylesheet_instruction(stylesheet))
    lines.append(etree.tostring(rss, encoding="unicode"))
    return "\n".join(lines) + "\n"


def build_rss(output_dir: Path, pages: Sequence[Page], settings: Settings) -> Path:
    path = output_dir / FEED_FILENAME
    write_text(path, render_rss(build_channel(pages, settings)))
    return path
