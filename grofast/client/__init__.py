"""GROFAST client SDK — session, route gate, entity fetchers and realtime."""

from grofast.client.backend import (
    SIGNED_IN,
    SIGNED_OUT,
    TOKEN_REFRESHED,
    USER_UPDATED,
    AuthClient,
    BackendClient,
)
from grofast.client.chat import ChannelFeed
from grofast.client.config import ClientSettings, load_client_settings
from grofast.client.fetcher import EntityFetcher, EntityStore, RequestFence
from grofast.client.gate import ROUTES, GateDecision, GateState, RoleGate
from grofast.client.realtime import RealtimeSubscriber, Subscription
from grofast.client.result import BackendError, Err, Ok, Result
from grofast.client.session import SessionManager

RESOURCES = (
    "employees",
    "tasks",
    "leave-requests",
    "attendance",
    "clients",
    "meetings",
    "channels",
    "messages",
    "work-updates",
    "learning-updates",
    "announcements",
)

__all__ = [
    # Transport / auth
    "AuthClient",
    "BackendClient",
    "SIGNED_IN",
    "SIGNED_OUT",
    "TOKEN_REFRESHED",
    "USER_UPDATED",
    # Config
    "ClientSettings",
    "load_client_settings",
    # Results
    "BackendError",
    "Err",
    "Ok",
    "Result",
    # Fetchers
    "EntityFetcher",
    "EntityStore",
    "RequestFence",
    "RESOURCES",
    # Session / gate
    "SessionManager",
    "RoleGate",
    "GateDecision",
    "GateState",
    "ROUTES",
    # Realtime / chat
    "RealtimeSubscriber",
    "Subscription",
    "ChannelFeed",
]
