"""
Unit tests for the station proxy: image cache, upstream fetching and routes.
"""

import threading
import urllib.error
import urllib.request
from unittest.mock import patch

import pytest
import requests

from rainwatch.api.station_proxy import (
    ImageCache,
    StationProxyHandler,
    build_server,
    content_type_for,
    get_station_image,
    prefetch_images,
)
from rainwatch.config import STATION_BASE_URL, STATION_GAUGES


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestImageCache:
    """Test ImageCache expiry."""

    def setup_method(self):
        self.clock = FakeClock()
        self.cache = ImageCache(ttl_seconds=120, clock=self.clock)

    def test_hit_within_ttl(self):
        self.cache.put("a.gif", b"GIF")
        self.clock.now += 119

        assert self.cache.get("a.gif") == b"GIF"

    def test_expires_at_ttl(self):
        self.cache.put("a.gif", b"GIF")
        self.clock.now += 120

        assert self.cache.get("a.gif") is None
        assert len(self.cache) == 0

    def test_put_sweeps_expired_entries(self):
        self.cache.put("once.gif", b"1")
        self.cache.put("recent.gif", b"2")
        self.clock.now += 120
        self.cache.put("new.gif", b"3")

        assert len(self.cache) == 1
        assert self.cache.get("new.gif") == b"3"

    def test_put_keeps_live_entries(self):
        self.cache.put("a.gif", b"1")
        self.clock.now += 60
        self.cache.put("b.gif", b"2")

        assert len(self.cache) == 2

    def test_miss(self):
        assert self.cache.get("missing.gif") is None


class TestStationImage:
    """Test get_station_image and prefetch_images with upstream mocked."""

    @patch("rainwatch.api.station_proxy.fetch_upstream")
    def test_cache_aside(self, mock_fetch):
        mock_fetch.return_value = b"GIF89a"
        cache = ImageCache(clock=FakeClock())

        assert get_station_image("OutsideTemp.gif", cache) == b"GIF89a"
        assert get_station_image("OutsideTemp.gif", cache) == b"GIF89a"
        mock_fetch.assert_called_once_with(f"{STATION_BASE_URL}/OutsideTemp.gif")

    @patch("rainwatch.api.station_proxy.fetch_upstream")
    def test_failure_not_cached(self, mock_fetch):
        mock_fetch.side_effect = requests.ConnectionError("down")
        cache = ImageCache(clock=FakeClock())

        with pytest.raises(requests.RequestException):
            get_station_image("OutsideTemp.gif", cache)
        assert len(cache) == 0

    @patch("rainwatch.api.station_proxy.fetch_upstream")
    def test_prefetch_counts_successes(self, mock_fetch):
        mock_fetch.side_effect = [requests.Timeout("slow")] + [b"x"] * (len(STATION_GAUGES) - 1)
        cache = ImageCache(clock=FakeClock())

        assert prefetch_images(cache) == len(STATION_GAUGES) - 1
        assert len(cache) == len(STATION_GAUGES) - 1


class TestContentType:
    @pytest.mark.parametrize(
        "path,expected",
        [
            ("OutsideTemp.gif", "image/gif"),
            ("chart.PNG", "image/png"),
            ("photo.jpg", "image/jpeg"),
            ("unknown.bin", "application/octet-stream"),
        ],
    )
    def test_by_extension(self, path, expected):
        assert content_type_for(path) == expected


class TestProxyRoutes:
    """Run the handler on an ephemeral port with upstream mocked."""

    def setup_method(self):
        StationProxyHandler.image_cache = ImageCache(clock=FakeClock())
        self.server = build_server("127.0.0.1", 0)
        self.port = self.server.server_address[1]
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.thread.start()

    def teardown_method(self):
        self.server.shutdown()
        self.server.server_close()

    def _get(self, path):
        try:
            with urllib.request.urlopen(f"http://127.0.0.1:{self.port}{path}", timeout=5) as resp:
                return resp.status, resp.headers, resp.read()
        except urllib.error.HTTPError as e:
            return e.code, e.headers, e.read()

    @patch("rainwatch.api.station_proxy.fetch_upstream")
    def test_weather_page(self, mock_fetch):
        mock_fetch.return_value = "טמפרטורה".encode("windows-1255")

        status, headers, body = self._get("/api/weather")

        assert status == 200
        assert headers["Content-Type"] == "text/html; charset=windows-1255"
        assert headers["Access-Control-Allow-Origin"] == "*"
        assert body.decode("windows-1255") == "טמפרטורה"

    @patch("rainwatch.api.station_proxy.fetch_upstream")
    def test_upstream_failure_is_502(self, mock_fetch):
        mock_fetch.side_effect = requests.ConnectionError("refused")

        status, headers, body = self._get("/api/sensors")

        assert status == 502
        assert b"refused" in body
        assert headers["Access-Control-Allow-Origin"] == "*"

    @patch("rainwatch.api.station_proxy.fetch_upstream")
    def test_image_route(self, mock_fetch):
        mock_fetch.return_value = b"GIF89a"

        status, headers, body = self._get("/station/OutsideTemp.gif")

        assert status == 200
        assert headers["Content-Type"] == "image/gif"
        assert body == b"GIF89a"

    def test_unknown_path_is_404(self):
        status, _, _ = self._get("/nope")
        assert status == 404

    def test_traversal_rejected(self):
        status, _, _ = self._get("/station/%2E%2E/secret.gif")
        assert status == 404
