"""
Backend registry.

Backends register themselves under a name; the rest of vulcano builds them
by that name.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Optional, Type

from ..config.settings import Settings, load_settings
from ..obs.logging import get_logger
from .base import Backend, BackendError

_backends: Dict[str, Type[Backend]] = {}


class UnknownBackendError(BackendError):
    """Raised when no backend is registered under the requested name."""
    pass


def register_backend(name: str) -> Callable[[Type[Backend]], Type[Backend]]:
    """Class decorator registering a Backend subclass under `name`."""
    def decorator(cls: Type[Backend]) -> Type[Backend]:
        _backends[name] = cls
        return cls
    return decorator


def registered_backends() -> Dict[str, Type[Backend]]:
    return dict(_backends)


def get_backend(name: str, conf: Any = None) -> Backend:
    """
    Build the backend registered as `name`.

    Raises:
        UnknownBackendError: If nothing is registered under `name`
    """
    try:
        cls = _backends[name]
    except KeyError:
        raise UnknownBackendError(
            f"Backend '{name}' is not registered. "
            f"Available backends: {', '.join(sorted(_backends)) or 'none'}"
        ) from None
    return cls(conf)


def create_backend(settings: Optional[Settings] = None) -> Backend:
    """
    Build the backend named in the settings, loading them if not given.

    Also applies the configured log level to the vulcano logger.
    """
    if settings is None:
        settings = load_settings()
    get_logger("vulcano").setLevel(settings.log_level)
    return get_backend(settings.backend, settings)
