"""
File metadata normalization.

Turns an ``lstat`` result into a FileStat: a closed file-type tag,
permission bits, mtime, size, owner/group names and, where the OS family
has a probe for it, a security label (e.g. an SELinux context).

Every lookup here degrades to ``None`` instead of raising.
"""

from __future__ import annotations
import os
import shlex
import stat as stat_mod
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from ..obs.logging import get_logger
from .command import CommandResult
from .os_family import LINUX

logger = get_logger("vulcano.backend.metadata")


class FileType(str, Enum):
    """File type vocabulary shared by all backends."""
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    CHARACTER_DEVICE = "character_device"
    BLOCK_DEVICE = "block_device"
    SOCKET = "socket"
    PIPE = "pipe"
    UNKNOWN = "unknown"


# Masks are tested in order; socket and block device share bits with
# symlink/file and directory/char device, so they must come first.
TYPES: Tuple[Tuple[FileType, int], ...] = (
    (FileType.SOCKET, stat_mod.S_IFSOCK),            # 0o140000
    (FileType.SYMLINK, stat_mod.S_IFLNK),            # 0o120000
    (FileType.FILE, stat_mod.S_IFREG),               # 0o100000
    (FileType.BLOCK_DEVICE, stat_mod.S_IFBLK),       # 0o060000
    (FileType.DIRECTORY, stat_mod.S_IFDIR),          # 0o040000
    (FileType.CHARACTER_DEVICE, stat_mod.S_IFCHR),   # 0o020000
    (FileType.PIPE, stat_mod.S_IFIFO),               # 0o010000
)

PERMISSION_BITS = 0o777

# GNU stat prints this for %C when the file carries no context.
LABEL_PLACEHOLDER = "?"


def classify_mode(mode: int) -> FileType:
    """Return the type of the first mask in TYPES fully set in `mode`."""
    for file_type, mask in TYPES:
        if mode & mask == mask:
            return file_type
    return FileType.UNKNOWN


@dataclass(frozen=True)
class FileStat:
    """
    Normalized file metadata.

    Every field is optional. An empty FileStat (no type) means the path
    could not be stat'ed at all and is falsy.
    """
    type: Optional[FileType] = None
    mode: Optional[int] = None
    mtime: Optional[int] = None
    size: Optional[int] = None
    owner: Optional[str] = None
    group: Optional[str] = None
    uid: Optional[int] = None
    gid: Optional[int] = None
    security_label: Optional[str] = None

    def __bool__(self) -> bool:
        return self.type is not None

    def to_dict(self) -> Dict[str, object]:
        """Fields that are set, with the type as its plain tag."""
        data = {k: v for k, v in asdict(self).items() if v is not None}
        if self.type is not None:
            data["type"] = self.type.value
        return data


EMPTY_STAT = FileStat()


# ==========================================
# Owner / group names
# ==========================================

if os.name == "posix":
    import grp
    import pwd

    def user_name(uid: int) -> Optional[str]:
        try:
            return pwd.getpwuid(uid).pw_name
        except KeyError:
            return None

    def group_name(gid: int) -> Optional[str]:
        try:
            return grp.getgrgid(gid).gr_name
        except KeyError:
            return None

else:

    def user_name(uid: int) -> Optional[str]:
        return None

    def group_name(gid: int) -> Optional[str]:
        return None


# ==========================================
# Security labels
# ==========================================

LabelProbe = Callable[[str], str]


def selinux_stat_command(path: str) -> str:
    return f"stat {shlex.quote(path)} 2>/dev/null --printf '%C'"


LABEL_PROBES: Dict[str, LabelProbe] = {
    LINUX: selinux_stat_command,
}


def label_probe_for(family: str) -> Optional[LabelProbe]:
    """Label command builder for an OS family, or None if it has none."""
    return LABEL_PROBES.get(family)


def accept_label(result: CommandResult) -> Optional[str]:
    """Label from a probe result; None unless it exited 0 with a real value."""
    if result.exit_status != 0:
        return None
    label = result.stdout.strip()
    if not label or label == LABEL_PLACEHOLDER:
        return None
    return label


# ==========================================
# Resolver
# ==========================================

def stat_path(
    path: str,
    run_command: Callable[[str], CommandResult],
    label_probe: Optional[LabelProbe] = None,
) -> FileStat:
    """
    Stat `path` without following a final symlink.

    Args:
        path: Path to inspect
        run_command: Runner used for the security label probe
        label_probe: Builds the label command for `path`; None skips labels

    Returns:
        FileStat, or EMPTY_STAT when lstat fails
    """
    try:
        st = os.lstat(path)
    except (OSError, ValueError) as e:
        logger.debug("lstat failed", extra={"path": path, "error": str(e)})
        return EMPTY_STAT

    label = None
    if label_probe is not None:
        label = accept_label(run_command(label_probe(path)))

    return FileStat(
        type=classify_mode(st.st_mode),
        mode=st.st_mode & PERMISSION_BITS,
        mtime=int(st.st_mtime),
        size=st.st_size,
        owner=user_name(st.st_uid),
        group=group_name(st.st_gid),
        uid=st.st_uid,
        gid=st.st_gid,
        security_label=label,
    )
