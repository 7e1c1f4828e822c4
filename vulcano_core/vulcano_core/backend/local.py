"""
Local backend.

Inspects the machine vulcano itself runs on: commands are spawned as
local processes and files are read straight from the local filesystem.
"""

from __future__ import annotations
import os
import platform
import stat as stat_mod
from typing import Any, Callable, Dict, Optional

from ..obs.logging import get_logger
from .base import Backend, FileCommon, OSCommon
from .command import CommandResult, run_command
from .metadata import FileStat, FileType, label_probe_for, stat_path
from .os_family import detect_family
from .registry import register_backend

logger = get_logger("vulcano.backend.local")

# Marks a memoized slot that hasn't been filled yet; None is a valid result.
_UNSET: Any = object()


class LocalOS(OSCommon):
    """The host operating system, classified once."""

    def __init__(self):
        super().__init__(
            family=detect_family(),
            release=platform.release(),
            arch=platform.machine(),
        )


def _stat_is(path: str, test: Callable[[int], bool]) -> bool:
    try:
        return test(os.stat(path).st_mode)
    except (OSError, ValueError):
        return False


class LocalFile(FileCommon):
    """
    A path on the local filesystem.

    stat, content and link_path are computed on first access and then
    kept for the lifetime of the handle, failures included. Predicates
    (exists, is_file, ...) hit the filesystem on every call.
    """

    def __init__(self, backend: "LocalBackend", path: str):
        super().__init__(path)
        self._backend = backend
        self._stat: FileStat = _UNSET
        self._content: Optional[str] = _UNSET
        self._link_path: Optional[str] = _UNSET

    @property
    def stat(self) -> FileStat:
        if self._stat is _UNSET:
            self._stat = stat_path(
                self._path,
                self._backend.run_command,
                label_probe_for(self._backend.os.family),
            )
        return self._stat

    @property
    def content(self) -> Optional[str]:
        if self._content is _UNSET:
            self._content = self._read_content()
        return self._content

    def _read_content(self) -> Optional[str]:
        # Devices and pipes are never read; a FIFO would block open().
        if not _stat_is(self._path, stat_mod.S_ISREG):
            logger.debug("Not a regular file", extra={"path": self._path})
            return None
        try:
            with open(self._path, "r", encoding="utf-8", newline="") as f:
                return f.read()
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.debug("Cannot read file", extra={"path": self._path, "error": str(e)})
            return None

    @property
    def link_path(self) -> Optional[str]:
        if self._link_path is _UNSET:
            self._link_path = self._read_link()
        return self._link_path

    def _read_link(self) -> Optional[str]:
        if self.stat.type is not FileType.SYMLINK:
            return None
        try:
            return os.readlink(self._path)
        except OSError:
            return None

    # ==========================================
    # Filesystem predicates
    # ==========================================

    @property
    def exists(self) -> bool:
        return os.path.exists(self._path)

    @property
    def is_file(self) -> bool:
        return os.path.isfile(self._path)

    @property
    def is_directory(self) -> bool:
        return os.path.isdir(self._path)

    @property
    def is_symlink(self) -> bool:
        return os.path.islink(self._path)

    @property
    def is_socket(self) -> bool:
        return _stat_is(self._path, stat_mod.S_ISSOCK)

    @property
    def is_pipe(self) -> bool:
        return _stat_is(self._path, stat_mod.S_ISFIFO)

    @property
    def is_block_device(self) -> bool:
        return _stat_is(self._path, stat_mod.S_ISBLK)

    @property
    def is_character_device(self) -> bool:
        return _stat_is(self._path, stat_mod.S_ISCHR)


@register_backend("local")
class LocalBackend(Backend):
    """
    Backend for the local machine.

    Args:
        conf: Run settings; kept for reference, not used by this backend
    """

    name = "local"

    def __init__(self, conf: Any = None):
        self.conf = conf
        self._files: Dict[str, LocalFile] = {}
        self._os = LocalOS()
        logger.debug(
            "Local backend ready",
            extra={"backend": self.name, "family": self._os.family},
        )

    @property
    def os(self) -> LocalOS:
        return self._os

    def file(self, path: str) -> LocalFile:
        handle = self._files.get(path)
        if handle is None:
            handle = self._files[path] = LocalFile(self, path)
        return handle

    def run_command(self, cmd: str) -> CommandResult:
        return run_command(cmd)

    def __str__(self) -> str:
        return "Local Command Runner"
