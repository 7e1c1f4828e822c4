"""
OS family detection.

Maps the raw host identifier reported by the Python build (an autoconf
triplet such as ``x86_64-pc-linux-gnu``) to the small family vocabulary
that resource checks branch on.
"""

from __future__ import annotations
import re
import sys
import sysconfig
from typing import Optional, Pattern, Tuple


AIX = "aix"
DARWIN = "darwin"
HPUX = "hpux"
LINUX = "linux"
FREEBSD = "freebsd"
OPENBSD = "openbsd"
NETBSD = "netbsd"
SOLARIS = "solaris2"
WINDOWS = "windows"

# Tried in order, first match wins.
FAMILY_PATTERNS: Tuple[Tuple[str, Pattern[str]], ...] = (
    (AIX, re.compile(r"aix(.+)$")),
    (DARWIN, re.compile(r"darwin(.+)$")),
    (HPUX, re.compile(r"hpux(.+)$")),
    (LINUX, re.compile(r"linux")),
    (FREEBSD, re.compile(r"freebsd(.+)$")),
    (OPENBSD, re.compile(r"openbsd(.+)$")),
    (NETBSD, re.compile(r"netbsd(.*)$")),
    (SOLARIS, re.compile(r"solaris2")),
    # Every Windows target is NT based; the Python runtime reports win32.
    (WINDOWS, re.compile(r"mswin|mingw32|windows|win32")),
)

FAMILIES = tuple(tag for tag, _ in FAMILY_PATTERNS)

_host_os: Optional[str] = None


def host_os() -> str:
    """
    Raw platform identifier of the running interpreter.

    Read once per process and cached.
    """
    global _host_os

    if _host_os is None:
        _host_os = sysconfig.get_config_var("HOST_GNU_TYPE") or sys.platform
    return _host_os


def detect_family(raw: Optional[str] = None) -> str:
    """
    Classify a raw platform identifier.

    Args:
        raw: Identifier to classify (default: the host's own)

    Returns:
        One of FAMILIES, or ``raw`` itself when nothing matches
    """
    if raw is None:
        raw = host_os()

    for tag, pattern in FAMILY_PATTERNS:
        if pattern.search(raw):
            return tag
    return raw
