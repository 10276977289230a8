"""
NSX client and firewall handle wiring for the API.
"""
import logging

from fastapi import Request

from nsx_dfw.clients.nsx_client import NSXClient
from nsx_dfw.core.config import get_settings
from nsx_dfw.services.firewall import DistributedFirewall

logger = logging.getLogger(__name__)


def create_client() -> NSXClient:
    """Build an NSX client from the current settings."""
    settings = get_settings()
    if not settings.has_nsx_credentials():
        logger.warning("NSX_USER/NSX_PASSWORD not configured - requests will be unauthenticated")
    return NSXClient.from_settings(settings)


def get_firewall(request: Request) -> DistributedFirewall:
    """
    Dependency returning the application's firewall handle.

    The handle is normally created in the lifespan; if the manager was not
    reachable at startup, the first request initializes it.
    """
    firewall = getattr(request.app.state, "firewall", None)
    if firewall is None:
        client = getattr(request.app.state, "nsx_client", None) or create_client()
        request.app.state.nsx_client = client
        firewall = DistributedFirewall.initialize(client)
        request.app.state.firewall = firewall
    return firewall
