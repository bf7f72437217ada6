"""Client layer for gw2api.

Classes:
    :class:`GW2Client` -- the public per-resource API.
    :class:`RequestOrchestrator` -- cache-aware list/detail request logic.
    :class:`HttpxTransport` -- default transport backed by :class:`httpx.AsyncClient`.

Example::

    from gw2api.client import GW2Client

    async with GW2Client() as api:
        achievements = await api.list_achievements()
"""

from gw2api.client.api import GW2Client
from gw2api.client.orchestrator import RequestOrchestrator, merge_results
from gw2api.client.transport import HttpxTransport, Transport, TransportResponse

__all__ = [
    "GW2Client",
    "HttpxTransport",
    "RequestOrchestrator",
    "Transport",
    "TransportResponse",
    "merge_results",
]
