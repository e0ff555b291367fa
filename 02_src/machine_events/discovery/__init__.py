"""Endpoint discovery module."""

from .resolver import EndpointResolver, IEndpointResolver, is_event_socket_name

__all__ = ["EndpointResolver", "IEndpointResolver", "is_event_socket_name"]
