"""Offline cache controller.

Mirrors the site's service worker lifecycle (install, activate, fetch) so
the caching policy can run and be tested outside a browser. Network access
goes through an injectable ``fetch`` callable; the default one uses
``requests``.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Optional
from urllib.parse import urljoin, urlparse

import requests

log = logging.getLogger(__name__)

CACHE_VERSION = "arhub-v1"
STATIC_CACHE = "arhub-static-v1"
DYNAMIC_CACHE = "arhub-dynamic-v1"

STATIC_FILES = (
    "/",
    "/offline",
    "/manifest.json",
    "/icon-192x192.png",
    "/icon-512x512.png",
    "/favicon.ico",
)
OFFLINE_PAGE = "/offline"


class NetworkError(Exception):
    """The request never produced an HTTP response."""


@dataclass
class FetchRequest:
    url: str
    method: str = "GET"
    destination: str = ""  # image, document, script, style or "" for API calls
    mode: str = "cors"  # "navigate" for page navigations

    @property
    def origin(self) -> str:
        p = urlparse(self.url)
        return f"{p.scheme}://{p.netloc}"


@dataclass
class FetchResponse:
    status: int
    body: bytes = b""
    headers: dict = field(default_factory=dict)
    url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def clone(self) -> "FetchResponse":
        return replace(self, headers=dict(self.headers))


def _text(body: str, status: int) -> FetchResponse:
    return FetchResponse(status=status, body=body.encode(), headers={"content-type": "text/plain"})


def requests_fetch(request: FetchRequest, timeout: float = 10) -> FetchResponse:
    try:
        r = requests.request(request.method, request.url, timeout=timeout)
    except requests.RequestException as e:
        raise NetworkError(str(e)) from e
    return FetchResponse(status=r.status_code, body=r.content, headers=dict(r.headers), url=r.url)


class Cache:
    def __init__(self):
        self._entries: dict[str, FetchResponse] = {}

    def match(self, url: str) -> Optional[FetchResponse]:
        hit = self._entries.get(url)
        return hit.clone() if hit is not None else None

    def put(self, url: str, response: FetchResponse) -> None:
        self._entries[url] = response.clone()

    def __contains__(self, url: str) -> bool:
        return url in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class CacheStorage:
    """Named caches, created on first open."""

    def __init__(self):
        self._caches: dict[str, Cache] = {}

    def open(self, name: str) -> Cache:
        return self._caches.setdefault(name, Cache())

    def keys(self) -> list[str]:
        return list(self._caches)

    def delete(self, name: str) -> bool:
        return self._caches.pop(name, None) is not None

    def has(self, name: str) -> bool:
        return name in self._caches


class OfflineCacheController:
    def __init__(
        self,
        origin: str,
        fetch: Callable[[FetchRequest], FetchResponse] = requests_fetch,
        caches: Optional[CacheStorage] = None,
        show_notification: Optional[Callable[[str, dict], None]] = None,
    ):
        self.origin = origin.rstrip("/")
        self.fetch = fetch
        self.caches = caches if caches is not None else CacheStorage()
        self.show_notification = show_notification
        self.waiting = True
        self.controls_clients = False

    def _abs(self, path: str) -> str:
        return urljoin(self.origin + "/", path)

    # lifecycle

    def install(self) -> bool:
        """Pre-cache the static shell. All-or-nothing, failures are logged."""
        log.info("Offline cache installing")
        cache = self.caches.open(STATIC_CACHE)
        fetched = {}
        try:
            for path in STATIC_FILES:
                url = self._abs(path)
                resp = self.fetch(FetchRequest(url=url))
                if not resp.ok:
                    raise NetworkError(f"{url} returned {resp.status}")
                fetched[url] = resp
        except NetworkError as e:
            log.error("Offline cache install failed: %s", e)
            return False
        for url, resp in fetched.items():
            cache.put(url, resp)
        self.waiting = False
        log.info("Offline cache installed (%d files)", len(fetched))
        return True

    def activate(self) -> list[str]:
        """Drop caches from older generations and take control of clients."""
        removed = []
        for name in self.caches.keys():
            if name not in (STATIC_CACHE, DYNAMIC_CACHE):
                log.info("Deleting old cache: %s", name)
                self.caches.delete(name)
                removed.append(name)
        self.controls_clients = True
        return removed

    # fetch routing

    def handle_fetch(self, request: FetchRequest) -> Optional[FetchResponse]:
        """Return a response, or None to let the request through untouched."""
        if request.method != "GET":
            return None
        if request.origin != self.origin:
            return None

        if request.destination == "image":
            return self._cache_first(request, DYNAMIC_CACHE, "Image not available")
        if request.destination == "document":
            return self._document(request)
        if request.destination in ("script", "style"):
            return self._cache_first(request, STATIC_CACHE, "Asset not available")
        return self._api(request)

    def _cache_first(self, request: FetchRequest, cache_name: str, miss_text: str) -> FetchResponse:
        cache = self.caches.open(cache_name)
        cached = cache.match(request.url)
        if cached is not None:
            return cached
        try:
            resp = self.fetch(request)
        except NetworkError as e:
            log.warning("%s request failed: %s", request.destination or "static", e)
            return _text(miss_text, 404)
        if resp.ok:
            cache.put(request.url, resp)
        return resp

    def _document(self, request: FetchRequest) -> FetchResponse:
        try:
            resp = self.fetch(request)
        except NetworkError as e:
            log.warning("Document request failed: %s", e)
        else:
            if resp.ok:
                self.caches.open(DYNAMIC_CACHE).put(request.url, resp)
            return resp

        static = self.caches.open(STATIC_CACHE)
        cached = static.match(request.url) or self.caches.open(DYNAMIC_CACHE).match(request.url)
        if cached is not None:
            return cached
        if request.mode == "navigate":
            offline = static.match(self._abs(OFFLINE_PAGE))
            return offline or _text("Offline", 503)
        return _text("Network error", 503)

    def _api(self, request: FetchRequest) -> FetchResponse:
        cache = self.caches.open(DYNAMIC_CACHE)
        try:
            resp = self.fetch(request)
        except NetworkError as e:
            log.warning("API request failed: %s", e)
            if request.method == "GET":
                cached = cache.match(request.url)
                if cached is not None:
                    return cached
            return _text("Network error", 503)
        if resp.ok and request.method == "GET":
            cache.put(request.url, resp)
        return resp

    # background events

    def handle_sync(self, tag: str) -> bool:
        log.info("Background sync triggered: %s", tag)
        if tag != "background-sync":
            return False
        # Nothing is queued while offline yet
        log.info("Performing background sync")
        return True

    def handle_push(self, payload: Optional[dict]) -> Optional[dict]:
        log.info("Push notification received")
        if not payload:
            return None
        options = {
            "body": payload.get("body"),
            "icon": payload.get("icon") or "/icon-192x192.png",
            "badge": payload.get("badge") or "/badge-72x72.png",
            "tag": payload.get("tag"),
            "data": payload.get("data"),
            "requireInteraction": bool(payload.get("requireInteraction", False)),
            "actions": payload.get("actions") or [],
        }
        if self.show_notification is not None:
            self.show_notification(payload.get("title", ""), options)
        return options

    def handle_message(self, message: Optional[dict]) -> Optional[dict]:
        if not message:
            return None
        kind = message.get("type")
        if kind == "SKIP_WAITING":
            self.waiting = False
            return None
        if kind == "GET_VERSION":
            return {"version": CACHE_VERSION}
        return None
