"""Media items collected while nobody is signed in"""

from client.storage import LocalStore

MEDIA_TYPES = ("movie", "book", "album")


def buffer_key(media_type: str) -> str:
    return f"mediator.guest.{media_type}"


class GuestBuffer:
    def __init__(self, store: LocalStore):
        self.store = store

    @staticmethod
    def _check(media_type: str):
        if media_type not in MEDIA_TYPES:
            raise ValueError(f"Unknown media type: {media_type}")

    def items(self, media_type: str) -> list[dict]:
        self._check(media_type)
        return list(self.store.get(buffer_key(media_type), []))

    def add(self, media_type: str, item: dict) -> bool:
        """Buffer a search result, skipping one already buffered with the same id"""
        self._check(media_type)
        items = self.items(media_type)
        external_id = str(item.get("externalId", item.get("id")))
        if any(str(i.get("externalId")) == external_id for i in items):
            return False
        items.append(
            {
                "mediaType": media_type,
                "externalId": external_id,
                "title": item.get("title"),
                "year": item.get("year"),
                "posterUrl": item.get("posterUrl"),
                "additionalData": item.get("additionalData"),
            }
        )
        self.store.set(buffer_key(media_type), items)
        return True

    def remove(self, media_type: str, external_id: str):
        self._check(media_type)
        items = [
            i for i in self.items(media_type) if str(i["externalId"]) != str(external_id)
        ]
        self.store.set(buffer_key(media_type), items)

    def clear(self, media_type: str):
        self._check(media_type)
        self.store.delete(buffer_key(media_type))

    def is_empty(self) -> bool:
        return not any(self.items(media_type) for media_type in MEDIA_TYPES)
