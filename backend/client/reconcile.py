"""Move the media a guest collected into the signed-in user's own lists"""

import logging
from dataclasses import dataclass, field

import httpx

from client.api import ApiError, MediatorClient
from client.guest import MEDIA_TYPES, GuestBuffer

logger = logging.getLogger("mediator.client")


def item_key(media_type: str, item: dict) -> str:
    return f"{media_type}:{item.get('externalId')}"


@dataclass
class ReconcileResult:
    added: int = 0
    skipped: int = 0
    failed: int = 0
    cleared: list[str] = field(default_factory=list)
    aborted: bool = False
    # items accepted by the server that are still buffered
    pushed: set[str] = field(default_factory=set)

    @property
    def complete(self) -> bool:
        return not self.aborted and not self.failed


def reconcile_guest_items(
    api: MediatorClient, guest: GuestBuffer, pushed: set[str] | None = None
) -> ReconcileResult:
    """Push every buffered guest item into the matching auto-list.

    ``pushed`` holds the keys of items a previous run already delivered; they
    are not sent again. A type's buffer is cleared only when all its items
    were accepted. Failing to resolve an auto-list stops the run, so that type
    and the ones after it stay buffered for the next sign in.
    """
    result = ReconcileResult(pushed=set(pushed or ()))
    for media_type in MEDIA_TYPES:
        items = guest.items(media_type)
        if not items:
            continue
        try:
            auto_list = api.auto_list(media_type)
        except (ApiError, httpx.HTTPError) as e:
            logger.error(f"Cannot resolve the {media_type} auto-list: {e}")
            result.aborted = True
            break

        failures = 0
        for item in items:
            key = item_key(media_type, item)
            if key in result.pushed:
                result.skipped += 1
                continue
            try:
                api.add_media_item(auto_list["id"], {**item, "mediaType": media_type})
            except (ApiError, httpx.HTTPError) as e:
                logger.error(
                    f"Cannot add guest {media_type} {item.get('externalId')}: {e}"
                )
                failures += 1
                continue
            result.added += 1
            result.pushed.add(key)

        if failures:
            result.failed += failures
        else:
            guest.clear(media_type)
            result.cleared.append(media_type)
            result.pushed.difference_update(item_key(media_type, i) for i in items)
    logger.info(
        f"Guest items reconciled: {result.added} added, {result.skipped} skipped,"
        f" {result.failed} failed" + (" (aborted)" if result.aborted else "")
    )
    return result
