from __future__ import annotations

import argparse
import sys
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Optional, Sequence
from urllib.parse import unquote, urlsplit

DEFAULT_PORT = 3000


def resolve_request_path(directory: Path, url_path: str) -> Path:
    path = unquote(urlsplit(url_path).path)
    parts = [part for part in path.split("/") if part and part not in {".", ".."}]
    if not parts:
        return directory / "index.html"
    target = directory.joinpath(*parts)
    if not target.suffix:
        # Extension-less links such as /about map to about.html.
        target = target.with_name(target.name + ".html")
    return target


class SiteRequestHandler(SimpleHTTPRequestHandler):
    def translate_path(self, path: str) -> str:
        return str(resolve_request_path(Path(self.directory), path))


def serve(directory: Path, port: int = DEFAULT_PORT, bind: str = "127.0.0.1") -> None:
    handler = partial(SiteRequestHandler, directory=str(directory))
    with ThreadingHTTPServer((bind, port), handler) as httpd:
        print(f"Serving {directory} at http://{bind}:{port}/")
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            print("Server stopped.")


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="docr-serve", description="Preview a generated site locally.")
    parser.add_argument("directory", help="Directory to be served.")
    parser.add_argument("--port", default=DEFAULT_PORT, type=int, help="Port to listen on.")
    parser.add_argument("--bind", default="127.0.0.1", help="Address to bind to.")
    args = parser.parse_args(argv)
    directory = Path(args.directory)
    if not directory.is_dir():
        print(f"docr-serve: error: {directory} is not a directory", file=sys.stderr)
        sys.exit(1)
    try:
        serve(directory.resolve(), args.port, args.bind)
    except OSError as exc:
        print(f"docr-serve: error: {exc}", file=sys.stderr)
        sys.exit(1)
