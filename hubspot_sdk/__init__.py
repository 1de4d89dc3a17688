"""
HubSpot SDK - Two-layer client for the HubSpot CRM API.

Layers:
- core: Raw types, request builder, options and HTTP client
- sdk: High-level HubSpotClient with one operations object per resource
"""

from hubspot_sdk.sdk import HubSpotClient

__version__ = "0.1.0"
__all__ = ["HubSpotClient"]
