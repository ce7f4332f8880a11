"""Client session: who is signed in, and what happens when that changes"""

import datetime
import logging

from client.api import CREDENTIAL_KEY, ApiError, MediatorClient
from client.events import AUTH_CHANGED
from client.guest import GuestBuffer
from client.reconcile import ReconcileResult, reconcile_guest_items

logger = logging.getLogger("mediator.client")

PROFILE_FIELDS = ("userId", "username", "email", "signupDate")


def reconciled_key(user_id: int) -> str:
    return f"mediator.reconciled.{user_id}"


class SessionManager:
    """Owns the stored credential and the guest reconciliation latch.

    Every sign in (login, register or a restored credential) publishes
    AUTH_CHANGED with the profile; every sign out publishes it with
    ``user=None``. The first authenticated transition of a session runs the
    guest reconciliation; later ones are ignored until a sign out resets the
    latch.
    """

    def __init__(self, api: MediatorClient, guest: GuestBuffer | None = None):
        self.api = api
        self.store = api.store
        self.bus = api.bus
        self.guest = guest or GuestBuffer(self.store)
        self.reconciled_user_id: int | None = None
        self.last_reconcile: ReconcileResult | None = None
        self.bus.subscribe(AUTH_CHANGED, self._on_auth_changed)

    @property
    def user(self) -> dict | None:
        credential = self.store.get(CREDENTIAL_KEY)
        if not credential:
            return None
        return {key: credential.get(key) for key in PROFILE_FIELDS}

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def _sign_in(self, answer: dict) -> dict:
        credential = {"token": answer["token"]}
        credential.update({key: answer.get(key) for key in PROFILE_FIELDS})
        self.store.set(CREDENTIAL_KEY, credential)
        user = self.user
        self.bus.publish(AUTH_CHANGED, user=user)
        return user

    def login(self, identifier: str, password: str) -> dict:
        return self._sign_in(self.api.login(identifier, password))

    def register(self, username: str, email: str, password: str) -> dict:
        return self._sign_in(self.api.register(username, email, password))

    def logout(self):
        self.store.delete(CREDENTIAL_KEY)
        self.bus.publish(AUTH_CHANGED, user=None)

    def restore(self) -> dict | None:
        """Validate a stored credential on startup"""
        if not self.store.get(CREDENTIAL_KEY):
            return None
        try:
            profile = self.api.me()
        except ApiError as e:
            # a 401 already cleared the credential and announced the sign out
            logger.warning(f"Stored credential not restored: {e}")
            return None
        credential = {**self.store.get(CREDENTIAL_KEY), **profile}
        self.store.set(CREDENTIAL_KEY, credential)
        user = self.user
        self.bus.publish(AUTH_CHANGED, user=user)
        return user

    def _on_auth_changed(self, user: dict | None = None):
        if user is None:
            self.reconciled_user_id = None
            return
        self.reconcile(user)

    def reconcile(self, user: dict) -> ReconcileResult | None:
        """Run the guest reconciliation once per sign in.

        The per-user marker keeps the items an unfinished run already
        delivered, so the next run does not send them again.
        """
        user_id = user["userId"]
        if self.reconciled_user_id == user_id:
            return None
        self.reconciled_user_id = user_id
        if self.guest.is_empty():
            return None

        marker = self.store.get(reconciled_key(user_id)) or {}
        result = reconcile_guest_items(
            self.api, self.guest, pushed=set(marker.get("pushed") or ())
        )
        self.last_reconcile = result
        self.store.set(
            reconciled_key(user_id),
            {
                "at": datetime.datetime.now(datetime.timezone.utc).isoformat(),
                "added": result.added,
                "complete": result.complete,
                "pushed": sorted(result.pushed),
            },
        )
        return result
