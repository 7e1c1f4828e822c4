"""
Contracts shared by every backend.

Resource checks only ever talk to these types, so a local, remote or
container backend can be swapped in without touching them.
"""

from __future__ import annotations
import hashlib
from abc import ABC, abstractmethod
from typing import Optional

from .command import CommandResult
from .metadata import FileStat, FileType
from .os_family import AIX, DARWIN, FREEBSD, HPUX, LINUX, NETBSD, OPENBSD, SOLARIS, WINDOWS


class BackendError(Exception):
    """Base error for backend operations."""
    pass


class OSCommon:
    """
    Operating system of a backend target.

    Immutable once built; family is one of the os_family tags or the raw
    platform string for an unrecognized target.
    """

    BSD_FAMILIES = (DARWIN, FREEBSD, OPENBSD, NETBSD)
    UNIX_FAMILIES = (AIX, HPUX, LINUX, SOLARIS) + BSD_FAMILIES

    def __init__(self, family: str, release: str = "", arch: str = ""):
        self._family = family
        self._release = release
        self._arch = arch

    @property
    def family(self) -> str:
        return self._family

    @property
    def release(self) -> str:
        return self._release

    @property
    def arch(self) -> str:
        return self._arch

    @property
    def is_linux(self) -> bool:
        return self._family == LINUX

    @property
    def is_bsd(self) -> bool:
        return self._family in self.BSD_FAMILIES

    @property
    def is_solaris(self) -> bool:
        return self._family == SOLARIS

    @property
    def is_unix(self) -> bool:
        return self._family in self.UNIX_FAMILIES

    @property
    def is_windows(self) -> bool:
        return self._family == WINDOWS

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OSCommon):
            return NotImplemented
        return (self._family, self._release, self._arch) == (other._family, other._release, other._arch)

    def __hash__(self) -> int:
        return hash((self._family, self._release, self._arch))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} family={self._family}>"


class FileCommon(ABC):
    """
    A file on a backend target.

    Subclasses provide the raw lookups (stat, predicates, content,
    link_path); the derived accessors below are shared.
    """

    def __init__(self, path: str):
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    # ==========================================
    # Backend-specific lookups
    # ==========================================

    @property
    @abstractmethod
    def stat(self) -> FileStat:
        """Normalized metadata; empty when the path cannot be stat'ed."""
        pass

    @property
    @abstractmethod
    def content(self) -> Optional[str]:
        """File text, or None when it cannot be read."""
        pass

    @property
    @abstractmethod
    def link_path(self) -> Optional[str]:
        """Symlink target, or None for anything that isn't a symlink."""
        pass

    @property
    @abstractmethod
    def exists(self) -> bool:
        pass

    @property
    @abstractmethod
    def is_file(self) -> bool:
        pass

    @property
    @abstractmethod
    def is_directory(self) -> bool:
        pass

    @property
    @abstractmethod
    def is_symlink(self) -> bool:
        pass

    @property
    @abstractmethod
    def is_socket(self) -> bool:
        pass

    @property
    @abstractmethod
    def is_pipe(self) -> bool:
        pass

    @property
    @abstractmethod
    def is_block_device(self) -> bool:
        pass

    @property
    @abstractmethod
    def is_character_device(self) -> bool:
        pass

    # ==========================================
    # Stat-derived fields
    # ==========================================

    @property
    def type(self) -> Optional[FileType]:
        return self.stat.type

    @property
    def mode(self) -> Optional[int]:
        return self.stat.mode

    @property
    def mtime(self) -> Optional[int]:
        return self.stat.mtime

    @property
    def size(self) -> Optional[int]:
        return self.stat.size

    @property
    def owner(self) -> Optional[str]:
        return self.stat.owner

    @property
    def group(self) -> Optional[str]:
        return self.stat.group

    @property
    def uid(self) -> Optional[int]:
        return self.stat.uid

    @property
    def gid(self) -> Optional[int]:
        return self.stat.gid

    @property
    def security_label(self) -> Optional[str]:
        return self.stat.security_label

    def is_mode(self, mode: int) -> bool:
        return self.mode == mode

    def is_owned_by(self, user: str) -> bool:
        return self.owner == user

    def is_grouped_into(self, group: str) -> bool:
        return self.group == group

    def is_linked_to(self, target: str) -> bool:
        return self.link_path == target

    @property
    def md5sum(self) -> Optional[str]:
        return self._digest("md5")

    @property
    def sha256sum(self) -> Optional[str]:
        return self._digest("sha256")

    def _digest(self, algorithm: str) -> Optional[str]:
        data = self.content
        if data is None:
            return None
        return hashlib.new(algorithm, data.encode("utf-8")).hexdigest()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} path={self._path!r}>"


class Backend(ABC):
    """
    One way of inspecting a target: run commands and look at files.
    """

    name: str = "base"

    @property
    @abstractmethod
    def os(self) -> OSCommon:
        pass

    @abstractmethod
    def file(self, path: str) -> FileCommon:
        """Handle for `path`; the same string always yields the same handle."""
        pass

    @abstractmethod
    def run_command(self, cmd: str) -> CommandResult:
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name}>"
