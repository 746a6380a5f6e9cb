from dataclasses import dataclass, field

import requests

from main import app
from routers.image_router import IMAGE_CACHE_CONTROL, get_image_fetcher


@dataclass
class FakeResponse:
    status_code: int = 200
    content: bytes = b""
    headers: dict = field(default_factory=dict)

    @property
    def ok(self):
        return self.status_code < 400


def _use_fetcher(fn):
    app.dependency_overrides[get_image_fetcher] = lambda: fn


def test_missing_url_is_400(client):
    r = client.get("/api/image-optimization")
    assert r.status_code == 400
    assert r.text == "Missing image URL"


def test_non_http_url_is_400(client):
    for bad in ("not a url", "ftp://files.test/a.png", "file:///etc/passwd"):
        r = client.get("/api/image-optimization", params={"url": bad})
        assert r.status_code == 400
        assert r.text == "Invalid image URL"


def test_proxies_bytes_with_long_cache(client):
    seen = []

    def fetch(url):
        seen.append(url)
        return FakeResponse(content=b"\x89PNG", headers={"content-type": "image/png"})

    _use_fetcher(fetch)
    r = client.get("/api/image-optimization", params={"url": "https://cdn.test/a.png", "w": 400, "q": 60})
    assert r.status_code == 200
    assert r.content == b"\x89PNG"
    assert r.headers["content-type"] == "image/png"
    assert r.headers["cache-control"] == IMAGE_CACHE_CONTROL
    assert seen == ["https://cdn.test/a.png"]


def test_missing_content_type_defaults_to_jpeg(client):
    _use_fetcher(lambda url: FakeResponse(content=b"jpg"))
    r = client.get("/api/image-optimization", params={"url": "https://cdn.test/a"})
    assert r.headers["content-type"] == "image/jpeg"


def test_upstream_error_is_404(client):
    _use_fetcher(lambda url: FakeResponse(status_code=503))
    r = client.get("/api/image-optimization", params={"url": "https://cdn.test/a.png"})
    assert r.status_code == 404
    assert r.text == "Failed to fetch image"


def test_network_failure_is_500(client):
    def fetch(url):
        raise requests.ConnectionError("refused")

    _use_fetcher(fetch)
    r = client.get("/api/image-optimization", params={"url": "https://cdn.test/a.png"})
    assert r.status_code == 500


def test_quality_out_of_range_is_400(client):
    r = client.get("/api/image-optimization", params={"url": "https://cdn.test/a.png", "q": 0})
    assert r.status_code == 400
