"""HTTP utilities package.

Exposes pooled httpx clients.
"""

from .client import aclose_all_clients, close_all_clients, get_async_httpx_client, get_httpx_client

__all__ = ["get_httpx_client", "get_async_httpx_client", "close_all_clients", "aclose_all_clients"]
