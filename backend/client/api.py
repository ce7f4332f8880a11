"""HTTP client for the Mediator REST API"""

import logging
from typing import Any

import httpx

from client.events import AUTH_CHANGED, FRIEND_REQUESTS_CHANGED, EventBus
from client.storage import LocalStore

logger = logging.getLogger("mediator.client")

CREDENTIAL_KEY = "mediator.credential"


class ApiError(Exception):
    def __init__(self, status_code: int, detail: str):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            detail = response.json().get("detail")
        except ValueError:
            detail = None
        if not isinstance(detail, str):
            detail = response.reason_phrase or "Request failed"
        return cls(response.status_code, detail)


class MediatorClient:
    """Thin wrapper around an httpx.Client.

    The bearer token comes from the credential kept in the store. Any 401
    answered to a request that carried a token drops the stored credential and
    announces the logout on the bus.
    """

    def __init__(
        self,
        http: httpx.Client,
        store: LocalStore,
        bus: EventBus,
        prefix: str = "/api",
    ):
        self.http = http
        self.store = store
        self.bus = bus
        self.prefix = prefix.rstrip("/")

    @property
    def credential(self) -> dict | None:
        return self.store.get(CREDENTIAL_KEY)

    @property
    def token(self) -> str | None:
        credential = self.credential
        return credential.get("token") if credential else None

    def _on_response(self, response: httpx.Response, had_credential: bool):
        if response.status_code == 401 and had_credential:
            logger.info("Credential rejected, signing out")
            self.store.delete(CREDENTIAL_KEY)
            self.bus.publish(AUTH_CHANGED, user=None)

    def request(self, method: str, path: str, **kwargs) -> Any:
        headers = dict(kwargs.pop("headers", None) or {})
        token = self.token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        response = self.http.request(
            method, f"{self.prefix}{path}", headers=headers, **kwargs
        )
        self._on_response(response, had_credential=bool(token))
        if response.is_error:
            raise ApiError.from_response(response)
        if not response.content:
            return None
        return response.json()

    def get(self, path: str, **kwargs):
        return self.request("GET", path, **kwargs)

    def post(self, path: str, json: Any = None, **kwargs):
        return self.request("POST", path, json=json, **kwargs)

    def put(self, path: str, json: Any = None, **kwargs):
        return self.request("PUT", path, json=json, **kwargs)

    def delete(self, path: str, **kwargs):
        return self.request("DELETE", path, **kwargs)

    # --- identity ---

    def register(self, username: str, email: str, password: str) -> dict:
        return self.post(
            "/auth/register",
            {"username": username, "email": email, "password": password},
        )

    def login(self, identifier: str, password: str) -> dict:
        return self.post("/auth/login", {"identifier": identifier, "password": password})

    def me(self) -> dict:
        return self.get("/auth/me")

    def forgot_password(self, email: str) -> dict:
        return self.post("/auth/forgot-password", {"email": email})

    def reset_password(self, token: str, password: str) -> dict:
        return self.post("/auth/reset-password", {"token": token, "password": password})

    # --- search ---

    def search(self, kind: str, query: str, page: int = 1) -> dict:
        return self.get(f"/search/{kind}", params={"q": query, "page": page})

    def details(self, kind: str, external_id: str) -> dict:
        return self.get(f"/search/{kind}/{external_id}")

    # --- lists and media ---

    def lists(self) -> list[dict]:
        return self.get("/lists")

    def public_lists(self) -> list[dict]:
        return self.get("/lists/public")

    def create_list(self, name: str, description=None, is_public=True) -> dict:
        return self.post(
            "/lists",
            {"name": name, "description": description, "isPublic": is_public},
        )

    def get_list(self, list_id: int) -> dict:
        return self.get(f"/lists/{list_id}")

    def update_list(self, list_id: int, **changes) -> dict:
        fields = {"name": "name", "description": "description", "is_public": "isPublic"}
        return self.put(
            f"/lists/{list_id}",
            {fields[key]: value for key, value in changes.items()},
        )

    def delete_list(self, list_id: int) -> dict:
        return self.delete(f"/lists/{list_id}")

    def auto_list(self, media_type: str) -> dict:
        return self.post("/lists/auto", {"mediaType": media_type})

    def user_auto_list(self, user_id: int, media_type: str) -> dict:
        return self.get(f"/lists/user/{user_id}/auto/{media_type}")

    def add_media_item(self, list_id: int, item: dict) -> dict:
        return self.post(f"/lists/{list_id}/media", item)

    def rate(self, list_id: int, media_id: int, rating: int) -> dict:
        return self.post(f"/lists/{list_id}/media/{media_id}/rate", {"rating": rating})

    def update_notes(self, list_id: int, media_id: int, notes: str | None) -> dict:
        return self.put(f"/lists/{list_id}/media/{media_id}/notes", {"notes": notes})

    def set_watched_with(self, list_id: int, media_id: int, friend_ids: list[int]):
        return self.put(
            f"/lists/{list_id}/media/{media_id}/watched-with",
            {"friendIds": friend_ids},
        )

    def delete_media_item(self, list_id: int, media_id: int) -> dict:
        return self.delete(f"/lists/{list_id}/media/{media_id}")

    # --- collaborations ---

    def request_collaboration(self, list_id: int) -> dict:
        return self.post("/collaborations/request", {"listId": list_id})

    def collaboration_requests(self) -> list[dict]:
        return self.get("/collaborations/requests")

    def my_collaboration_requests(self) -> list[dict]:
        return self.get("/collaborations/my-requests")

    def respond_to_collaboration(self, request_id: int, status: str) -> dict:
        return self.put(f"/collaborations/requests/{request_id}", {"status": status})

    def collaborators(self, list_id: int) -> list[dict]:
        return self.get(f"/collaborations/list/{list_id}")

    # --- friends ---
    # mutations announce FRIEND_REQUESTS_CHANGED so badges and lists can refresh

    def friends(self) -> list[dict]:
        return self.get("/friends")

    def directory(self) -> list[dict]:
        return self.get("/friends/directory")

    def search_users(self, username: str) -> list[dict]:
        return self.get(f"/friends/search/{username}")

    def incoming_friend_requests(self) -> list[dict]:
        return self.get("/friends/requests/incoming")

    def outgoing_friend_requests(self) -> list[dict]:
        return self.get("/friends/requests/outgoing")

    def send_friend_request(self, to_user_id: int) -> dict:
        result = self.post("/friends/request", {"toUserId": to_user_id})
        self.bus.publish(FRIEND_REQUESTS_CHANGED)
        return result

    def respond_to_friend_request(self, request_id: int, status: str) -> dict:
        result = self.post(f"/friends/request/{request_id}/respond", {"status": status})
        self.bus.publish(FRIEND_REQUESTS_CHANGED)
        return result

    def cancel_friend_request(self, to_user_id: int) -> dict:
        result = self.delete(f"/friends/request/outgoing/{to_user_id}")
        self.bus.publish(FRIEND_REQUESTS_CHANGED)
        return result

    def remove_friend(self, friend_id: int) -> dict:
        result = self.delete(f"/friends/{friend_id}")
        self.bus.publish(FRIEND_REQUESTS_CHANGED)
        return result
