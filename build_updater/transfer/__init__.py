"""
Network Transfer Layer.

This package fetches manifests and artifacts from the update server.
"""

from .client import TransferClient, create_ssl_context

__all__ = ["TransferClient", "create_ssl_context"]
