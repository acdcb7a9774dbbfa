#!/usr/bin/env python3
"""
station_proxy.py: Read-through proxy in front of the private weather station.

Browsers cannot read the station's pages directly (no CORS headers, plain
HTTP), so this process re-serves them:

- ``/api/weather``      the station's current-conditions page (windows-1255 HTML)
- ``/api/sensors``      the station's tag-list page
- ``/station/<image>``  gauge and history images, cached in memory for 120 s

Every response carries ``Access-Control-Allow-Origin: *``. The gauge images
listed in ``STATION_GAUGES`` are prefetched in the background at startup.

Usage:
    python -m rainwatch.api.station_proxy [--host 0.0.0.0] [--port 3000]
"""

import argparse
import json
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import PurePosixPath
from typing import Dict, Optional, Tuple
from urllib.parse import unquote, urlsplit

import requests

from rainwatch.config import (
    DEFAULT_PROXY_PORT,
    IMAGE_CACHE_TTL_SECONDS,
    MIME_TYPES,
    REQUEST_TIMEOUT_SECONDS,
    STATION_BASE_URL,
    STATION_CURRENT_PAGE,
    STATION_GAUGES,
    STATION_TAG_LIST_URL,
    get_setting,
)
from rainwatch.utils.log_util import app_logger

logger = app_logger(__name__)


class ImageCache:
    """In-memory image cache with a fixed time-to-live, safe across threads."""

    def __init__(self, ttl_seconds: float = IMAGE_CACHE_TTL_SECONDS, clock=time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[bytes, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            body, stored_at = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                return None
            return body

    def put(self, key: str, body: bytes) -> None:
        with self._lock:
            now = self._clock()
            expired = [
                k
                for k, (_, stored_at) in self._entries.items()
                if now - stored_at >= self.ttl_seconds
            ]
            for k in expired:
                del self._entries[k]
            self._entries[key] = (body, now)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def fetch_upstream(url: str) -> bytes:
    """
    GET ``url`` and return the body.

    :raises requests.RequestException: On network failure or error status.
    """
    resp = requests.get(url, timeout=REQUEST_TIMEOUT_SECONDS)
    resp.raise_for_status()
    return resp.content


def content_type_for(path: str) -> str:
    return MIME_TYPES.get(PurePosixPath(path).suffix.lower(), "application/octet-stream")


def get_station_image(image_path: str, cache: ImageCache) -> bytes:
    """Image bytes from the cache, fetching from the station on a miss."""
    cached = cache.get(image_path)
    if cached is not None:
        logger.debug(f"Image cache hit: {image_path}")
        return cached

    body = fetch_upstream(f"{STATION_BASE_URL}/{image_path}")
    cache.put(image_path, body)
    return body


def prefetch_images(cache: ImageCache) -> int:
    """
    Warm the cache with every configured gauge image.

    :return: Number of images fetched successfully.
    """
    images = [g["image"] for g in STATION_GAUGES]
    logger.info(f"Prefetching {len(images)} gauge images...")
    fetched = 0
    for image in images:
        try:
            get_station_image(image, cache)
            fetched += 1
        except requests.RequestException as e:
            logger.warning(f"Prefetch failed for {image}: {e}")
    logger.info(f"Prefetched {fetched}/{len(images)} images.")
    return fetched


class StationProxyHandler(BaseHTTPRequestHandler):
    image_cache = ImageCache()

    def log_message(self, fmt, *args):
        logger.debug("%s - %s" % (self.address_string(), fmt % args))

    def _send(self, status: int, body: bytes, headers: Dict[str, str]) -> None:
        self.send_response(status)
        for name, value in headers.items():
            self.send_header(name, value)
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _send_json_error(self, status: int, message: str) -> None:
        body = json.dumps({"error": message}).encode("utf-8")
        self._send(status, body, {"Content-Type": "application/json"})

    def _proxy_page(self, url: str, content_type: str) -> None:
        try:
            body = fetch_upstream(url)
        except requests.RequestException as e:
            logger.error(f"Upstream fetch failed for {url}: {e}")
            self._send_json_error(502, str(e))
            return
        self._send(
            200,
            body,
            {
                "Content-Type": content_type,
                "Cache-Control": "no-cache",
            },
        )

    def _proxy_image(self, image_path: str) -> None:
        if not image_path or ".." in PurePosixPath(image_path).parts:
            self._send(404, b"Not Found", {"Content-Type": "text/plain"})
            return
        try:
            body = get_station_image(image_path, self.image_cache)
        except requests.RequestException as e:
            logger.error(f"Image proxy failed for {image_path}: {e}")
            self._send(502, b"Proxy error", {"Content-Type": "text/plain"})
            return
        self._send(
            200,
            body,
            {
                "Content-Type": content_type_for(image_path),
                "Cache-Control": f"public, max-age={IMAGE_CACHE_TTL_SECONDS}",
            },
        )

    def do_GET(self):
        path = unquote(urlsplit(self.path).path)

        if path == "/api/weather":
            self._proxy_page(
                f"{STATION_BASE_URL}/{STATION_CURRENT_PAGE}",
                "text/html; charset=windows-1255",
            )
        elif path == "/api/sensors":
            self._proxy_page(STATION_TAG_LIST_URL, "text/html; charset=utf-8")
        elif path.startswith("/station/"):
            self._proxy_image(path[len("/station/") :])
        else:
            self._send(404, b"Not Found", {"Content-Type": "text/plain"})


def build_server(host: str, port: int) -> ThreadingHTTPServer:
    return ThreadingHTTPServer((host, port), StationProxyHandler)


def main():
    parser = argparse.ArgumentParser(description="Proxy the weather station's pages and images")
    parser.add_argument("--host", default="0.0.0.0", help="Interface to bind (default: 0.0.0.0)")
    parser.add_argument(
        "--port",
        type=int,
        default=int(get_setting("PORT", DEFAULT_PROXY_PORT)),
        help="Port to listen on (default: $PORT or 3000)",
    )
    parser.add_argument("--no-prefetch", action="store_true", help="Skip the image prefetch")
    args = parser.parse_args()

    server = build_server(args.host, args.port)
    logger.info(f"Station proxy running at http://{args.host}:{args.port}/")

    if not args.no_prefetch:
        threading.Thread(
            target=prefetch_images, args=(StationProxyHandler.image_cache,), daemon=True
        ).start()

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Stopping station proxy...")
    finally:
        server.server_close()


if __name__ == "__main__":
    main()
