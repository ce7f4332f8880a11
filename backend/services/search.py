"""Metadata search across the movie, book and album providers.

Every adapter turns its provider's answer into the same shapes:

    result: {"id", "title", "year", "posterUrl", "author" | "artist"}
    page:   {"results", "page", "total_pages", "total_results"}

A provider that fails (network, HTTP status, unexpected payload) yields an
empty page and an error in the logs, never an exception.
"""

import logging
import math
from typing import Any

import httpx

import settings
from utils.logs import ratelimited_log

logger = logging.getLogger("mediator.search")


def empty_page(page: int = 1) -> dict[str, Any]:
    return {"results": [], "page": page, "total_pages": 0, "total_results": 0}


def make_page(results: list[dict], page: int, total: int, per_page: int) -> dict:
    return {
        "results": results,
        "page": page,
        "total_pages": math.ceil(total / per_page) if per_page else 0,
        "total_results": total,
    }


class ProviderAdapter:
    name = "provider"

    @property
    def per_page(self) -> int:
        return settings.SEARCH_PAGE_SIZE

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def get_json(self, url: str, params: dict | None = None) -> Any | None:
        try:
            response = await self.client.get(url, params=params)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            ratelimited_log(logger.error, f"{self.name} request failed: {e!r}")
            return None

    async def search(self, query: str, page: int = 1, limit: int | None = None):
        raise NotImplementedError

    async def details(self, external_id: str) -> dict | None:
        raise NotImplementedError


def _clean(value: str | None) -> str | None:
    if not value or value == "N/A":
        return None
    return value


class MovieSearch(ProviderAdapter):
    """OMDb: fixed pages of 10 results"""

    name = "omdb"
    per_page = 10

    @staticmethod
    def normalize(movie: dict) -> dict:
        return {
            "id": movie["imdbID"],
            "title": movie["Title"],
            "year": _clean(movie.get("Year")),
            "posterUrl": _clean(movie.get("Poster")),
        }

    async def search(self, query: str, page: int = 1, limit: int | None = None):
        data = await self.get_json(
            settings.OMDB_URL,
            params={
                "apikey": settings.OMDB_API_KEY,
                "s": query,
                "type": "movie",
                "page": page,
            },
        )
        if not data:
            return empty_page(page)
        if data.get("Response") != "True":
            # OMDb answers 200 with an Error for "no results" and for a bad key
            if data.get("Error") != "Movie not found!":
                ratelimited_log(logger.error, f"omdb error: {data.get('Error')}")
            return empty_page(page)
        try:
            results = [self.normalize(movie) for movie in data.get("Search") or []]
            total = int(data.get("totalResults") or len(results))
        except (KeyError, TypeError, ValueError) as e:
            ratelimited_log(logger.error, f"omdb unexpected payload: {e!r}")
            return empty_page(page)
        return make_page(results, page, total, self.per_page)

    async def details(self, external_id: str) -> dict | None:
        data = await self.get_json(
            settings.OMDB_URL,
            params={"apikey": settings.OMDB_API_KEY, "i": external_id, "plot": "full"},
        )
        if not data or data.get("Response") != "True":
            return None
        return {
            **self.normalize(data),
            "rated": _clean(data.get("Rated")),
            "released": _clean(data.get("Released")),
            "runtime": _clean(data.get("Runtime")),
            "genre": _clean(data.get("Genre")),
            "director": _clean(data.get("Director")),
            "actors": _clean(data.get("Actors")),
            "plot": _clean(data.get("Plot")),
        }


class BookSearch(ProviderAdapter):
    """Open Library search and works API"""

    name = "openlibrary"

    @staticmethod
    def cover_url(cover_id: int | None, size: str = "M") -> str | None:
        if not cover_id:
            return None
        return f"{settings.OPEN_LIBRARY_COVERS_URL}/b/id/{cover_id}-{size}.jpg"

    @staticmethod
    def work_id(key: str) -> str:
        return key.removeprefix("/works/")

    def normalize(self, book: dict) -> dict:
        year = book.get("first_publish_year")
        return {
            "id": self.work_id(book["key"]),
            "title": book["title"],
            "year": str(year) if year else None,
            "posterUrl": self.cover_url(book.get("cover_i")),
            "author": ", ".join(book.get("author_name") or []) or None,
        }

    async def search(self, query: str, page: int = 1, limit: int | None = None):
        limit = limit or self.per_page
        data = await self.get_json(
            f"{settings.OPEN_LIBRARY_URL}/search.json",
            params={"q": query, "page": page, "limit": limit},
        )
        if not data:
            return empty_page(page)
        try:
            results = [self.normalize(book) for book in data.get("docs") or []]
            total = int(data.get("numFound") or 0)
        except (KeyError, TypeError, ValueError) as e:
            ratelimited_log(logger.error, f"openlibrary unexpected payload: {e!r}")
            return empty_page(page)
        return make_page(results, page, total, limit)

    async def details(self, external_id: str) -> dict | None:
        work_id = self.work_id(external_id)
        data = await self.get_json(f"{settings.OPEN_LIBRARY_URL}/works/{work_id}.json")
        if not data or "title" not in data:
            return None
        description = data.get("description")
        if isinstance(description, dict):
            description = description.get("value")
        covers = data.get("covers") or []
        return {
            "id": work_id,
            "title": data["title"],
            "year": data.get("first_publish_date"),
            "posterUrl": self.cover_url(covers[0] if covers else None, "L"),
            "description": description,
            "subjects": data.get("subjects") or [],
        }


class AlbumSearch(ProviderAdapter):
    """Deezer album search, paginated with index/limit"""

    name = "deezer"

    @staticmethod
    def normalize(album: dict) -> dict:
        release_date = album.get("release_date") or ""
        return {
            "id": str(album["id"]),
            "title": album["title"],
            "year": release_date[:4] or None,
            "posterUrl": album.get("cover_medium") or album.get("cover") or None,
            "artist": (album.get("artist") or {}).get("name"),
        }

    async def search(self, query: str, page: int = 1, limit: int | None = None):
        limit = limit or self.per_page
        data = await self.get_json(
            f"{settings.DEEZER_URL}/search/album",
            params={"q": query, "index": (page - 1) * limit, "limit": limit},
        )
        if not data or "error" in data:
            if data:
                ratelimited_log(logger.error, f"deezer error: {data['error']}")
            return empty_page(page)
        try:
            results = [self.normalize(album) for album in data.get("data") or []]
            total = int(data.get("total") or 0)
        except (KeyError, TypeError, ValueError) as e:
            ratelimited_log(logger.error, f"deezer unexpected payload: {e!r}")
            return empty_page(page)
        return make_page(results, page, total, limit)

    async def details(self, external_id: str) -> dict | None:
        data = await self.get_json(f"{settings.DEEZER_URL}/album/{external_id}")
        if not data or "error" in data or "id" not in data:
            return None
        tracks = (data.get("tracks") or {}).get("data") or []
        return {
            **self.normalize(data),
            "posterUrl": data.get("cover_big") or data.get("cover_medium"),
            "label": data.get("label"),
            "tracks": [
                {"title": t.get("title"), "duration": t.get("duration")}
                for t in tracks
            ],
        }


class SearchGateway:
    """Holds the three adapters and the HTTP client they share"""

    def __init__(self, client: httpx.AsyncClient | None = None):
        self.client = client or httpx.AsyncClient(
            verify=settings.HTTPS_VERIFY,
            headers={"User-Agent": "Mediator/1.0"},
            follow_redirects=True,
        )
        self.movies = MovieSearch(self.client)
        self.books = BookSearch(self.client)
        self.albums = AlbumSearch(self.client)

    def adapter(self, kind: str) -> ProviderAdapter:
        return {"movies": self.movies, "books": self.books, "albums": self.albums}[
            kind
        ]

    async def close(self):
        """Explicitly close the HTTP client"""
        await self.client.aclose()
