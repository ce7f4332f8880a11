from client.api import ApiError, MediatorClient
from client.events import AUTH_CHANGED, FRIEND_REQUESTS_CHANGED, EventBus
from client.guest import GuestBuffer
from client.reconcile import ReconcileResult, reconcile_guest_items
from client.session import SessionManager
from client.storage import LocalStore

__all__ = [
    "AUTH_CHANGED",
    "ApiError",
    "EventBus",
    "FRIEND_REQUESTS_CHANGED",
    "GuestBuffer",
    "LocalStore",
    "MediatorClient",
    "ReconcileResult",
    "SessionManager",
    "reconcile_guest_items",
]
