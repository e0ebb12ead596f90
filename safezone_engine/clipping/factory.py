"""Clipping backend factory: selects the polygon clipping library by name.

The factory maintains a registry of known backends.  New backends are
registered with ``register_backend``; the built-in ones are added on
first use.

Usage::

    from safezone_engine.clipping.factory import get_backend

    backend = get_backend("shapely")

The backend name is read from ``SAFEZONE_CLIPPING_BACKEND`` via
``EngineConfig.clipping_backend``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from safezone_engine.clipping.base import ClippingBackend, ClippingBackendError

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

SHAPELY = "shapely"

# Each entry maps a backend name to a callable returning the backend
# *class*, so a library is only imported once its backend is selected.
_BACKEND_REGISTRY: dict[str, Callable[[], type[ClippingBackend]]] = {}


def _register_builtin_backends() -> None:
    def _shapely() -> type[ClippingBackend]:
        from safezone_engine.clipping.shapely_backend import ShapelyClippingBackend

        return ShapelyClippingBackend

    _BACKEND_REGISTRY[SHAPELY] = _shapely


def _ensure_registry() -> None:
    """Initialise the backend registry once (idempotent)."""
    if not _BACKEND_REGISTRY:
        _register_builtin_backends()


def register_backend(
    name: str,
    loader: Callable[[], type[ClippingBackend]],
) -> None:
    """Register a custom clipping backend.

    Args:
        name: Backend name (e.g. ``"pyclipper"``).
        loader: A zero-argument callable that returns the backend class.

    Raises:
        ValueError: If the name is empty.
    """
    if not name:
        msg = "Backend name must be non-empty"
        raise ValueError(msg)
    _ensure_registry()
    _BACKEND_REGISTRY[name] = loader
    logger.debug("Registered clipping backend: %s", name)


def get_backend(name: str = SHAPELY) -> ClippingBackend:
    """Create and return a clipping backend instance.

    Raises:
        ClippingBackendError: If the named backend is not registered.
    """
    _ensure_registry()

    loader = _BACKEND_REGISTRY.get(name)
    if loader is None:
        available = ", ".join(sorted(_BACKEND_REGISTRY))
        msg = f"Unknown clipping backend: {name!r}. Available: {available}"
        raise ClippingBackendError(backend=name, message=msg)

    logger.debug("Creating clipping backend: %s", name)
    return loader()()


def list_backends() -> list[str]:
    """Return the names of all registered clipping backends."""
    _ensure_registry()
    return sorted(_BACKEND_REGISTRY)
