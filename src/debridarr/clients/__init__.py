"""API clients for Real-Debrid and Trakt."""

from debridarr.clients.base import BaseApiClient, ProxyRotation
from debridarr.clients.realdebrid import RealDebridClient
from debridarr.clients.trakt import TraktClient

__all__ = ["BaseApiClient", "ProxyRotation", "RealDebridClient", "TraktClient"]
