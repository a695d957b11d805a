"""
Command-line client for the imagevault gateway.

    imagevault upload photo.jpg -k "beach, sunset"
    imagevault search set
"""
import argparse
import mimetypes
import sys
from pathlib import Path
from typing import List, Optional

import httpx

DEFAULT_BASE_URL = "http://localhost:4000"


class ClientError(Exception):
    pass


class GatewayClient:
    def __init__(self, base_url: str = DEFAULT_BASE_URL, transport: Optional[httpx.BaseTransport] = None):
        self.http = httpx.Client(base_url=base_url, transport=transport, timeout=30.0)

    def close(self):
        self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _json(self, response: httpx.Response) -> dict:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.is_error:
            message = body.get("error") or f"Request failed with status {response.status_code}"
            if body.get("missing"):
                message = f"{message}: missing {', '.join(body['missing'])}"
            elif body.get("details"):
                message = f"{message}: {body['details']}"
            raise ClientError(message)
        return body

    def upload(self, path: Optional[str], keywords: str = "") -> dict:
        if not path:
            raise ClientError("Please choose an image first")
        file_path = Path(path)
        if not file_path.is_file():
            raise ClientError(f"No such file: {path}")

        content_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
        with file_path.open("rb") as fh:
            files = {"image": (file_path.name, fh, content_type)}
            response = self.http.post("/api/upload", files=files, data={"keywords": keywords})
        return self._json(response)

    def search(self, q: str = "") -> List[dict]:
        response = self.http.get("/api/search", params={"q": q})
        return self._json(response).get("items", [])


def render_items(items: List[dict]) -> str:
    if not items:
        return "No images found."
    tiles = []
    for item in items:
        caption = ", ".join(item.get("keywords") or []) or "(no keywords)"
        tiles.append(f"{item['url']}\n  {caption}")
    return "\n".join(tiles)


def main(argv: Optional[List[str]] = None, transport: Optional[httpx.BaseTransport] = None) -> int:
    p = argparse.ArgumentParser(prog="imagevault", description="Upload and search tagged images")
    p.add_argument("--base-url", default=DEFAULT_BASE_URL, help="Gateway base URL")
    sub = p.add_subparsers(dest="command", required=True)

    up = sub.add_parser("upload", help="Upload an image with comma-separated keywords")
    up.add_argument("file", nargs="?", help="Image file to upload")
    up.add_argument("-k", "--keywords", default="", help='e.g. "beach, sunset"')

    search = sub.add_parser("search", help="Search images by keyword substring")
    search.add_argument("query", nargs="?", default="", help="Empty lists everything")

    args = p.parse_args(argv)

    with GatewayClient(args.base_url, transport=transport) as client:
        try:
            if args.command == "upload":
                result = client.upload(args.file, args.keywords)
                print(f"Uploaded {result['key']}")
                print(render_items([result]))
            else:
                print(render_items(client.search(args.query)))
        except (ClientError, httpx.HTTPError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
