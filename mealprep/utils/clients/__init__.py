"""
Centralized client initialization module.

This module provides lazy-loaded shared clients for the application.
Handlers fetch clients here and inject them into the services they build.
"""
from mealprep.utils.dynamo import get_dynamo
from mealprep.utils.identity import IdentityClient

_identity = None

def get_identity() -> IdentityClient:
    """Get or create identity provider client."""
    global _identity
    if _identity is None:
        _identity = IdentityClient()
    return _identity

__all__ = ["get_dynamo", "get_identity"]
