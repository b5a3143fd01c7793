from __future__ import annotations

import argparse
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from .config import DEFAULT_CONFIG, Settings, check_directories, resolve_settings
from .content import read_overview, scan_documents
from .errors import DocrError, OutputError
from .feed import build_rss
from .markup import Converter, MarkdownConverter
from .pages import Page, build_pages, render_index, render_page_files, write_page_files
from .render import DEFAULT_TEMPLATES, TemplateRenderer, copy_static_assets
from .utils import clean_output_dir, parse_bool, parse_int


@dataclass
class BuildResult:
    pages: tuple[Page, ...]
    written: list[Path] = field(default_factory=list)
    feed: Optional[Path] = None


def default_renderer(settings: Settings) -> TemplateRenderer:
    if settings.builtin_templates:
        return TemplateRenderer.from_mapping(DEFAULT_TEMPLATES)
    return TemplateRenderer.from_directory(settings.template_dir)


def build_site(
    settings: Settings,
    converter: Optional[Converter] = None,
    renderer: Optional[TemplateRenderer] = None,
    quiet: bool = False,
) -> BuildResult:
    def echo(message: str) -> None:
        if not quiet:
            print(message)

    if converter is None:
        converter = MarkdownConverter()
    if renderer is None:
        renderer = default_renderer(settings)

    check_directories(settings)
    # Everything that can fail on input or templates happens before the output tree is touched.
    readme_html = converter.convert(read_overview(settings.markdown_dir))
    documents = scan_documents(settings.markdown_dir)
    pages = build_pages(
        documents,
        converter,
        settings.timestamps_from_filename,
        workers=settings.build_workers,
    )
    rendered = render_page_files(renderer, pages, settings, echo=echo)
    rendered.append(("index.html", render_index(renderer, readme_html, pages, settings)))

    output_dir = settings.output_dir
    if settings.clean:
        clean_output_dir(output_dir, Path.cwd())
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputError(f"Cannot create output directory {output_dir}: {exc}") from exc

    result = BuildResult(pages=pages)
    if settings.template_dir.is_dir():
        result.written.extend(copy_static_assets(settings.template_dir, output_dir))
    result.written.extend(write_page_files(output_dir, rendered, echo=echo))
    if settings.enable_rss:
        result.feed = build_rss(output_dir, pages, settings)
        result.written.append(result.feed)
        echo(f"Generated feed: {result.feed.name}")
    return result


def parse_args(argv: Optional[Sequence[str]] = None) -> tuple[argparse.Namespace, Settings]:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG,
        help="Path to settings file (JSON/TOML/YAML).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    config_path = Path(pre_args.config)
    if not config_path.exists():
        print(f"Config file not found: {config_path}, using defaults.", file=sys.stderr)
    defaults = resolve_settings(config_path)

    parser = argparse.ArgumentParser(
        prog="docr",
        description="Generate a static site and RSS feed from a directory of Markdown files.",
    )
    parser.add_argument("--config", default=pre_args.config, help="Path to settings file (JSON/TOML/YAML).")
    parser.add_argument("--markdown-dir", default=str(defaults.markdown_dir), help="Directory containing Markdown documents.")
    parser.add_argument("--template-dir", default=str(defaults.template_dir), help="Directory containing templates and assets.")
    parser.add_argument("--output-dir", default=str(defaults.output_dir), help="Output directory for the site.")
    parser.add_argument("--site-name", default=defaults.site_name, help="Site title.")
    parser.add_argument("--github-username", default=defaults.github_username, help="Owner handle shown in the footer.")
    parser.add_argument("--site-url", default=defaults.site_url, help="Public site URL used for the feed.")
    parser.add_argument("--site-description", default=defaults.site_description, help="Site description.")
    parser.add_argument(
        "--timestamps-from-filename",
        action=argparse.BooleanOptionalAction,
        default=defaults.timestamps_from_filename,
        help="Parse page dates from DD-MM-YYYY file names.",
    )
    parser.add_argument(
        "--enable-rss",
        action=argparse.BooleanOptionalAction,
        default=defaults.enable_rss,
        help="Generate rss.xml.",
    )
    parser.add_argument(
        "--builtin-templates",
        action=argparse.BooleanOptionalAction,
        default=defaults.builtin_templates,
        help="Use the bundled page and index templates.",
    )
    parser.add_argument(
        "--clean",
        action=argparse.BooleanOptionalAction,
        default=defaults.clean,
        help="Remove the output directory before building.",
    )
    parser.add_argument(
        "--build-workers",
        default=defaults.build_workers,
        type=int,
        help="Number of worker threads for Markdown conversion.",
    )
    parser.add_argument("--footer-year", default=defaults.footer_year, help="Year shown in the footer.")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print errors.")
    args = parser.parse_args(argv)

    settings = Settings.from_mapping(
        {
            "markdown_dir": args.markdown_dir,
            "template_dir": args.template_dir,
            "output_dir": args.output_dir,
            "site_name": args.site_name,
            "github_username": args.github_username,
            "site_url": args.site_url,
            "site_description": args.site_description,
            "timestamps_from_filename": parse_bool(args.timestamps_from_filename),
            "enable_rss": parse_bool(args.enable_rss),
            "builtin_templates": parse_bool(args.builtin_templates),
            "clean": parse_bool(args.clean),
            "build_workers": parse_int(args.build_workers, 1),
            "footer_year": args.footer_year,
        }
    )
    return args, settings


def main(argv: Optional[Sequence[str]] = None) -> None:
    try:
        args, settings = parse_args(argv)
        start = time.perf_counter()
        result = build_site(settings, quiet=args.quiet)
    except DocrError as exc:
        print(f"docr: error: {exc}", file=sys.stderr)
        sys.exit(1)
    elapsed = time.perf_counter() - start
    if not args.quiet:
        print(f"Build completed in {elapsed:.2f}s.")
        print(f"Site generated in: {settings.output_dir} ({len(result.pages)} pages)")
