"""Async client for the Hacker News Firebase API and Algolia search."""

import logging

import httpx

from hnfeed.models import Item, ItemKind, User

logger = logging.getLogger(__name__)

BASE_URL = "https://hacker-news.firebaseio.com/v0"
SEARCH_URL = "https://hn.algolia.com/api/v1/search"

# CLI feed name -> API list endpoint
STORY_LISTS = {
    "top": "topstories",
    "new": "newstories",
    "best": "beststories",
    "ask": "askstories",
    "show": "showstories",
    "jobs": "jobstories",
}


class APIError(RuntimeError):
    """A request failed: transport error, bad status, or undecodable body."""


class NotFound(LookupError):
    """The API returned an empty record for the requested ID."""


class HNClient:
    """Thin async wrapper around the read-only HN endpoints.

    Unknown IDs and usernames are not errors: the API answers ``null`` and
    the client returns an empty record (see ``Item.is_absent``).
    """

    def __init__(
        self,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        base_url: str = BASE_URL,
        search_url: str = SEARCH_URL,
    ):
        self.base_url = base_url.rstrip("/")
        self.search_url = search_url
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
            headers={"User-Agent": "hnfeed"},
        )

    async def __aenter__(self) -> "HNClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, url: str, params: dict | None = None):
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as e:
            raise APIError(f"Request to {url} failed: {e}") from e

        if response.status_code != httpx.codes.OK:
            raise APIError(f"HN API: {response.status_code} {response.reason_phrase}")

        try:
            return response.json()
        except ValueError as e:
            raise APIError(f"Invalid JSON from {url}") from e

    async def fetch_item(self, item_id: int) -> Item:
        """Fetch a single item by ID."""
        data = await self._get(f"{self.base_url}/item/{item_id}.json")
        if data is not None and not isinstance(data, dict):
            raise APIError(f"Unexpected payload for item {item_id}")
        return Item.from_json(data)

    async def fetch_user(self, username: str) -> User:
        """Fetch a user profile by username."""
        data = await self._get(f"{self.base_url}/user/{username}.json")
        if data is not None and not isinstance(data, dict):
            raise APIError(f"Unexpected payload for user {username}")
        return User.from_json(data)

    async def fetch_list(self, name: str) -> list[int]:
        """Fetch a named list of item IDs, e.g. ``topstories``."""
        data = await self._get(f"{self.base_url}/{name}.json")
        if data is None:
            return []
        if not isinstance(data, list):
            raise APIError(f"Unexpected payload for list {name}")
        try:
            return [int(x) for x in data]
        except (TypeError, ValueError) as e:
            raise APIError(f"Malformed ID in list {name}") from e

    async def search(self, query: str, limit: int) -> list[Item]:
        """Full-text story search through Algolia."""
        data = await self._get(
            self.search_url,
            params={"query": query, "tags": "story", "hitsPerPage": limit},
        )
        if not isinstance(data, dict):
            raise APIError("Unexpected search payload")

        items = []
        for hit in data.get("hits", [])[:limit]:
            try:
                items.append(parse_search_hit(hit))
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping malformed search hit: %r", hit)
        return items


def parse_search_hit(hit: dict) -> Item:
    """Map an Algolia hit onto the Item model."""
    return Item(
        id=int(hit["objectID"]),
        kind=ItemKind.STORY.value,
        author=hit.get("author") or "",
        time=int(hit.get("created_at_i") or 0),
        text=hit.get("story_text") or "",
        url=hit.get("url") or "",
        score=int(hit.get("points") or 0),
        title=hit.get("title") or "",
        descendants=int(hit.get("num_comments") or 0),
    )
