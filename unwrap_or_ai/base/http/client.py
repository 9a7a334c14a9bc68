"""Pooled ``httpx`` clients shared by every backend client.

One ``httpx.Client`` is kept per ``(base_url, purpose)`` pair, so concurrent
recoveries against the same backend reuse a connection pool. ``AsyncClient``
instances cannot cross event loops and are therefore pooled per
``(base_url, purpose, loop)``. Each entry holds a weak reference to its loop;
entries whose loop has closed are evicted and closed on the next lookup.

Timeouts are fixed when a client is built, from ``get_timeout_config()``.
Sync clients are closed at interpreter exit. :func:`aclose_all_clients`
closes the async clients of the running loop.
"""

from __future__ import annotations

import asyncio
import atexit
import logging
import threading
import weakref
from typing import Any, Dict, Optional, Tuple

import httpx

from ..logging import get_logger, log_event
from ..timeouts import get_timeout_config

_sync_pool: Dict[Tuple[Optional[str], str], httpx.Client] = {}
_AsyncKey = Tuple[Optional[str], str, int]
_async_pool: Dict[_AsyncKey, Tuple["weakref.ref[asyncio.AbstractEventLoop]", httpx.AsyncClient]] = {}
_pool_lock = threading.RLock()

_logger = get_logger("http")


def _client_kwargs(base_url: Optional[str]) -> Dict[str, Any]:
    cfg = get_timeout_config()
    kwargs: Dict[str, Any] = {
        "timeout": httpx.Timeout(cfg.http_timeout_seconds, connect=cfg.connect_timeout_seconds)
    }
    if base_url:
        kwargs["base_url"] = base_url
    return kwargs


def _usable(client: Any) -> bool:
    return client is not None and not client.is_closed


def get_httpx_client(base_url: Optional[str], purpose: str) -> httpx.Client:
    """Return the pooled sync client for ``base_url`` and ``purpose``.

    ``purpose`` separates pools that share a base URL (``"groq.chat"``);
    keep it stable. A client that was closed is replaced.
    """
    key = (base_url, purpose)
    existing = _sync_pool.get(key)
    if _usable(existing):
        return existing  # type: ignore[return-value]
    with _pool_lock:
        existing = _sync_pool.get(key)
        if _usable(existing):
            return existing  # type: ignore[return-value]
        fresh = httpx.Client(**_client_kwargs(base_url))
        _sync_pool[key] = fresh
    log_event(_logger, "http.client.created", purpose=purpose, base_url=base_url, mode="sync", level=logging.DEBUG)
    return fresh


def _loop_gone(ref: "weakref.ref[asyncio.AbstractEventLoop]") -> bool:
    loop = ref()
    return loop is None or loop.is_closed()


def _retire(client: httpx.AsyncClient) -> None:
    """Close a client whose loop is gone.

    Its sockets belong to a closed loop and can never be awaited, so
    ``aclose()`` is stepped inline; whatever it still waits on is abandoned.
    """
    closing = client.aclose()
    try:
        closing.send(None)
    except StopIteration:
        return
    except Exception as exc:  # dead transports raise RuntimeError on close
        log_event(_logger, "http.client.retire_failed", error=repr(exc), level=logging.DEBUG)
        return
    closing.close()


def _evict_dead_loops() -> None:
    stale = [key for key, (ref, _) in _async_pool.items() if _loop_gone(ref)]
    for key in stale:
        _, client = _async_pool.pop(key)
        if not client.is_closed:
            _retire(client)
    if stale:
        log_event(_logger, "http.client.evicted", count=len(stale), level=logging.DEBUG)


def get_async_httpx_client(base_url: Optional[str], purpose: str) -> httpx.AsyncClient:
    """Return the pooled async client for the running loop. Call from a coroutine."""
    loop = asyncio.get_running_loop()
    key = (base_url, purpose, id(loop))
    with _pool_lock:
        _evict_dead_loops()
        entry = _async_pool.get(key)
        # ids are reused once a loop is freed, so compare the loop itself
        if entry is not None and entry[0]() is loop and _usable(entry[1]):
            return entry[1]
        fresh = httpx.AsyncClient(**_client_kwargs(base_url))
        _async_pool[key] = (weakref.ref(loop), fresh)
    log_event(_logger, "http.client.created", purpose=purpose, base_url=base_url, mode="async", level=logging.DEBUG)
    return fresh


def close_all_clients() -> None:
    """Close every pooled sync client and drop references to async ones.

    Async clients are not awaited here; :func:`aclose_all_clients` does that.
    """
    with _pool_lock:
        doomed = list(_sync_pool.values())
        _sync_pool.clear()
        _async_pool.clear()
    for client in doomed:
        client.close()


async def aclose_all_clients() -> None:
    """Close the async clients that belong to the running loop."""
    loop_id = id(asyncio.get_running_loop())
    with _pool_lock:
        owned = [key for key in _async_pool if key[2] == loop_id]
        doomed = [_async_pool.pop(key)[1] for key in owned]
    for client in doomed:
        await client.aclose()


@atexit.register
def _close_on_exit() -> None:
    with _pool_lock:
        doomed = list(_sync_pool.values())
        _sync_pool.clear()
        _async_pool.clear()
    for client in doomed:
        try:
            client.close()
        except Exception:  # nosec B110 - interpreter teardown
            pass


__all__ = ["get_httpx_client", "get_async_httpx_client", "close_all_clients", "aclose_all_clients"]
