"""Bounded-concurrency hydration of item IDs, and the view load routines.

Each load routine makes all of its requests and then returns exactly one
completion event; nothing is streamed back piecemeal.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from hnfeed.api import HNClient, NotFound
from hnfeed.events import ItemLoaded, StoriesLoaded, UserLoaded
from hnfeed.models import Item

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 20
COMMENT_LIMIT = 50
SUBMISSION_LIMIT = 10

FetchFunc = Callable[[int], Awaitable[Item]]


@dataclass
class FetchResult:
    """Outcome of a batch fetch.

    ``results[i]`` belongs to ``ids[i]``; failed slots are None. ``error`` is
    the failure with the lowest position in ``ids``, if any.
    """

    results: list[Item | None] = field(default_factory=list)
    error: Exception | None = None
    error_index: int | None = None

    def present(self) -> list[Item]:
        """Successfully fetched items, in request order."""
        return [item for item in self.results if item is not None]


async def fetch_many(fetch: FetchFunc, ids: list[int], cap: int = DEFAULT_CONCURRENCY) -> FetchResult:
    """
    Hydrate ``ids`` with at most ``cap`` fetches in flight.

    Every ID gets its own task. A failure does not cancel or delay the
    others: the call returns once all tasks are done, with successful slots
    filled and the first (by position) error reported.

    Args:
        fetch: Coroutine function resolving one ID to an Item
        ids: IDs to fetch, in display order
        cap: Max concurrent fetches (clamped to at least 1)

    Returns:
        FetchResult with one slot per ID
    """
    if not ids:
        return FetchResult()

    gate = asyncio.Semaphore(max(1, cap))
    results: list[Item | None] = [None] * len(ids)
    errors: list[Exception | None] = [None] * len(ids)

    async def fetch_one(index: int, item_id: int) -> None:
        async with gate:
            try:
                results[index] = await fetch(item_id)
            except Exception as e:
                logger.debug("Fetch of item %s failed: %s", item_id, e)
                errors[index] = e

    await asyncio.gather(*(fetch_one(i, item_id) for i, item_id in enumerate(ids)))

    for index, error in enumerate(errors):
        if error is not None:
            return FetchResult(results=results, error=error, error_index=index)
    return FetchResult(results=results)


async def load_stories(
    client: HNClient,
    list_name: str,
    count: int,
    cap: int = DEFAULT_CONCURRENCY,
) -> StoriesLoaded:
    """Resolve a named list and hydrate its first ``count`` entries."""
    try:
        ids = await client.fetch_list(list_name)
    except Exception as e:
        return StoriesLoaded(error=e)

    batch = await fetch_many(client.fetch_item, ids[:max(0, count)], cap)
    items = [item for item in batch.present() if not item.is_absent]
    return StoriesLoaded(items=items, error=batch.error)


async def adopt_items(items: list[Item]) -> StoriesLoaded:
    """Wrap already-fetched items (search results) as a list load."""
    return StoriesLoaded(items=list(items))


async def load_search(client: HNClient, query: str, limit: int) -> StoriesLoaded:
    """Run a search and deliver the hits as a list load."""
    try:
        items = await client.search(query, limit)
    except Exception as e:
        return StoriesLoaded(error=e)
    return StoriesLoaded(items=items)


async def load_item(
    client: HNClient,
    item_id: int,
    cap: int = DEFAULT_CONCURRENCY,
    comment_limit: int = COMMENT_LIMIT,
) -> ItemLoaded:
    """Fetch a story and, concurrently, its first ``comment_limit`` direct replies.

    Deeper replies are never fetched. A reply that fails to load leaves an
    empty slot, and the first such failure is reported alongside whatever
    did arrive.
    """
    try:
        story = await client.fetch_item(item_id)
    except Exception as e:
        return ItemLoaded(error=e)

    if story.is_absent:
        return ItemLoaded(error=NotFound(f"Item {item_id} not found"))

    kids = list(story.kids[:max(0, comment_limit)])
    if not kids:
        return ItemLoaded(story=story)

    batch = await fetch_many(client.fetch_item, kids, cap)
    if batch.error is not None:
        failed = sum(1 for item in batch.results if item is None)
        logger.warning(
            "%d of %d comments on item %s failed to load (first: %s)",
            failed, len(kids), item_id, batch.error,
        )
    return ItemLoaded(story=story, comments=batch.results, error=batch.error)


async def load_user(
    client: HNClient,
    username: str,
    limit: int = SUBMISSION_LIMIT,
) -> UserLoaded:
    """Fetch a profile and up to ``limit`` of the user's live stories.

    Submissions are fetched one at a time, newest first, skipping comments,
    jobs, polls and anything dead or deleted. Scanning stops as soon as
    ``limit`` stories have been collected.
    """
    try:
        user = await client.fetch_user(username)
    except Exception as e:
        return UserLoaded(error=e)

    if user.is_absent:
        return UserLoaded(user=None)

    if limit <= 0:
        return UserLoaded(user=user)

    items: list[Item] = []
    for item_id in user.submitted:
        try:
            item = await client.fetch_item(item_id)
        except Exception as e:
            logger.debug("Skipping submission %s of %s: %s", item_id, username, e)
            continue

        if item.is_story and not item.dead and not item.deleted:
            items.append(item)
            if len(items) >= limit:
                break

    return UserLoaded(user=user, items=items)
