"""Dependency providers for the API routes."""

from .deps import ServicesDep, close_api_clients, get_api_clients, get_domain_events_client, get_services

__all__ = ["ServicesDep", "close_api_clients", "get_api_clients", "get_domain_events_client", "get_services"]
