"""Tastebook - Supabase access."""

from tastebook.db.client import get_authenticated_client, get_client, get_service_client

__all__ = ["get_client", "get_service_client", "get_authenticated_client"]
