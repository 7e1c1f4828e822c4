"""
Backends for vulcano.

A backend runs commands and inspects files on one kind of target behind
a common interface (see base.py). Backends are looked up by name.
"""

from .base import Backend, BackendError, FileCommon, OSCommon
from .command import CommandResult
from .metadata import FileStat, FileType
from .registry import (
    UnknownBackendError,
    create_backend,
    get_backend,
    register_backend,
    registered_backends,
)
from .local import LocalBackend, LocalFile, LocalOS

__all__ = [
    'Backend',
    'BackendError',
    'CommandResult',
    'FileCommon',
    'FileStat',
    'FileType',
    'LocalBackend',
    'LocalFile',
    'LocalOS',
    'OSCommon',
    'UnknownBackendError',
    'create_backend',
    'get_backend',
    'register_backend',
    'registered_backends',
]
