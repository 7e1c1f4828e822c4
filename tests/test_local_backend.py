"""
Tests for the local backend: facade, file handle cache and file handles.
"""

import hashlib
import logging
import os
import pytest
from vulcano_core.backend import local
from vulcano_core.backend.base import Backend, FileCommon, OSCommon
from vulcano_core.backend.command import CommandResult
from vulcano_core.backend.local import LocalBackend, LocalFile, LocalOS
from vulcano_core.backend.metadata import EMPTY_STAT, FileType, selinux_stat_command
from vulcano_core.backend.os_family import detect_family

posix_only = pytest.mark.skipif(os.name != "posix", reason="POSIX filesystem features")


@pytest.fixture
def backend():
    return LocalBackend(conf=None)


# ==========================================
# Facade
# ==========================================

def test_backend_contract(backend):
    assert isinstance(backend, Backend)
    assert isinstance(backend.os, OSCommon)
    assert backend.name == "local"
    assert str(backend) == "Local Command Runner"


def test_conf_is_kept_untouched():
    conf = {"anything": object()}
    assert LocalBackend(conf).conf is conf


def test_os_family_is_computed_once(backend):
    assert isinstance(backend.os, LocalOS)
    assert backend.os.family == detect_family()
    assert backend.os is backend.os


def test_os_predicates():
    os_ = OSCommon("freebsd")
    assert os_.is_bsd and os_.is_unix
    assert not os_.is_linux and not os_.is_windows
    assert OSCommon("linux").is_linux
    assert OSCommon("solaris2").is_solaris
    assert OSCommon("windows").is_windows and not OSCommon("windows").is_unix
    unknown = OSCommon("plan9")
    assert unknown.family == "plan9"
    assert not (unknown.is_unix or unknown.is_windows)


@posix_only
def test_run_command(backend):
    result = backend.run_command("echo hi")
    assert result.stdout == "hi\n"
    assert result.exit_status == 0


def test_run_command_missing_executable(backend):
    assert backend.run_command("vulcano-no-such-binary").exit_status == 1


# ==========================================
# Handle cache
# ==========================================

def test_same_path_same_handle(backend, tmp_path):
    path = str(tmp_path)
    handle = backend.file(path)
    assert isinstance(handle, LocalFile)
    assert isinstance(handle, FileCommon)
    assert backend.file(path) is handle
    assert handle.path == path


def test_different_strings_different_handles(backend, tmp_path):
    a = backend.file(str(tmp_path))
    b = backend.file(str(tmp_path) + "/")
    assert a is not b


def test_handles_are_per_backend(tmp_path):
    assert LocalBackend().file(str(tmp_path)) is not LocalBackend().file(str(tmp_path))


# ==========================================
# Metadata
# ==========================================

def test_regular_file_stat(backend, tmp_path):
    p = tmp_path / "f.txt"
    p.write_bytes(b"a" * 42)
    p.chmod(0o644)
    f = backend.file(str(p))
    assert f.type is FileType.FILE
    assert f.mode == 0o644
    assert f.size == 42
    assert f.is_mode(0o644)
    assert f.link_path is None


def test_stat_is_memoized_and_not_refreshed(backend, tmp_path):
    p = tmp_path / "grow.txt"
    p.write_bytes(b"a" * 42)
    f = backend.file(str(p))
    first = f.stat
    p.write_bytes(b"a" * 100)
    assert f.stat is first
    assert backend.file(str(p)).size == 42


def test_missing_path(backend, tmp_path):
    f = backend.file(str(tmp_path / "nope"))
    assert f.stat is EMPTY_STAT
    assert f.type is None
    assert f.owner is None and f.group is None and f.size is None
    assert f.exists is False
    assert f.is_file is False
    assert f.content is None
    assert f.link_path is None


def test_failed_stat_is_not_retried(backend, tmp_path):
    p = tmp_path / "later.txt"
    f = backend.file(str(p))
    assert f.stat is EMPTY_STAT
    p.write_text("now it exists", encoding="utf-8")
    assert f.stat is EMPTY_STAT
    assert f.exists is True


def test_permission_denied_gives_empty_record(backend, tmp_path, monkeypatch):
    def denied(path):
        raise PermissionError(13, "Permission denied", path)
    monkeypatch.setattr(os, "lstat", denied)
    assert backend.file(str(tmp_path / "secret")).stat is EMPTY_STAT


@posix_only
@pytest.mark.skipif(hasattr(os, "geteuid") and os.geteuid() == 0, reason="root ignores permissions")
def test_unreadable_parent_gives_empty_record(backend, tmp_path):
    locked = tmp_path / "locked"
    locked.mkdir()
    (locked / "inner").write_text("x", encoding="utf-8")
    locked.chmod(0)
    try:
        assert backend.file(str(locked / "inner")).stat is EMPTY_STAT
    finally:
        locked.chmod(0o755)


@posix_only
def test_symlink(backend, tmp_path):
    target = tmp_path / "target.txt"
    target.write_text("hello", encoding="utf-8")
    link = tmp_path / "link"
    os.symlink(str(target), str(link))
    f = backend.file(str(link))
    assert f.type is FileType.SYMLINK
    assert f.is_symlink is True
    assert f.is_file is True  # follows the link
    assert f.link_path == str(target)
    assert f.is_linked_to(str(target))
    assert f.link_path is f.link_path
    assert f.content == "hello"


@posix_only
def test_dangling_symlink(backend, tmp_path):
    link = tmp_path / "dangling"
    os.symlink(str(tmp_path / "gone"), str(link))
    f = backend.file(str(link))
    assert f.type is FileType.SYMLINK
    assert f.is_symlink is True
    assert f.exists is False
    assert f.link_path == str(tmp_path / "gone")


@posix_only
def test_named_pipe(backend, tmp_path):
    fifo = tmp_path / "fifo"
    os.mkfifo(str(fifo))
    f = backend.file(str(fifo))
    assert f.type is FileType.PIPE
    assert f.is_pipe is True
    assert f.is_file is False
    assert f.is_socket is False


@posix_only
def test_character_device(backend):
    f = backend.file("/dev/null")
    assert f.type is FileType.CHARACTER_DEVICE
    assert f.is_character_device is True
    assert f.is_block_device is False


def test_directory(backend, tmp_path):
    f = backend.file(str(tmp_path))
    assert f.type is FileType.DIRECTORY
    assert f.is_directory is True
    assert f.exists is True
    assert f.content is None


@posix_only
def test_owner_helpers(backend, tmp_path):
    import pwd
    p = tmp_path / "mine"
    p.write_text("", encoding="utf-8")
    f = backend.file(str(p))
    me = pwd.getpwuid(os.lstat(p).st_uid).pw_name
    assert f.owner == me
    assert f.is_owned_by(me)
    assert not f.is_owned_by(me + "-other")
    assert f.is_grouped_into(f.group)


def test_security_label_uses_backend_runner(backend, tmp_path, monkeypatch):
    calls = []

    def fake_run(cmd):
        calls.append(cmd)
        return CommandResult(stdout="system_u:object_r:tmp_t:s0", stderr="", exit_status=0)

    monkeypatch.setattr(local, "label_probe_for", lambda family: selinux_stat_command)
    monkeypatch.setattr(backend, "run_command", fake_run)
    p = tmp_path / "labeled"
    p.write_text("", encoding="utf-8")
    f = backend.file(str(p))
    assert f.security_label == "system_u:object_r:tmp_t:s0"
    assert f.security_label == "system_u:object_r:tmp_t:s0"
    assert calls == [selinux_stat_command(str(p))]


def test_family_without_probe_skips_label(backend, tmp_path, monkeypatch):
    def fail_run(cmd):
        raise AssertionError(f"unexpected command: {cmd}")

    monkeypatch.setattr(local, "label_probe_for", lambda family: None)
    monkeypatch.setattr(backend, "run_command", fail_run)
    f = backend.file(str(tmp_path))
    assert f.type is FileType.DIRECTORY
    assert f.security_label is None


# ==========================================
# Content
# ==========================================

def test_content(backend, tmp_path):
    p = tmp_path / "motd"
    p.write_bytes("héllo\r\nworld\n".encode("utf-8"))
    f = backend.file(str(p))
    assert f.content == "héllo\r\nworld\n"


def test_content_invalid_utf8(backend, tmp_path):
    p = tmp_path / "blob"
    p.write_bytes(b"\xff\xfe\x00bad")
    assert backend.file(str(p)).content is None


@posix_only
def test_fifo_content_is_not_read(backend, tmp_path):
    fifo = tmp_path / "fifo"
    os.mkfifo(str(fifo))
    f = backend.file(str(fifo))
    assert f.content is None
    assert f.sha256sum is None


@posix_only
def test_device_content_is_not_read(backend):
    assert backend.file("/dev/null").content is None
    assert backend.file("/dev/zero").content is None


def test_content_read_error_is_logged(backend, tmp_path, caplog):
    caplog.set_level(logging.DEBUG, logger="vulcano")
    p = tmp_path / "blob"
    p.write_bytes(b"\xff\xfe")
    assert backend.file(str(p)).content is None
    records = [r for r in caplog.records if r.getMessage() == "Cannot read file"]
    assert records and records[0].path == str(p)
    assert "utf-8" in records[0].error


def test_content_failure_is_memoized(backend, tmp_path):
    p = tmp_path / "late"
    f = backend.file(str(p))
    assert f.content is None
    p.write_text("created afterwards", encoding="utf-8")
    assert f.content is None


def test_content_is_memoized(backend, tmp_path):
    p = tmp_path / "once"
    p.write_text("first", encoding="utf-8")
    f = backend.file(str(p))
    assert f.content == "first"
    p.write_text("second", encoding="utf-8")
    assert f.content == "first"


def test_checksums(backend, tmp_path):
    p = tmp_path / "sum"
    p.write_text("hello\n", encoding="utf-8")
    f = backend.file(str(p))
    assert f.md5sum == hashlib.md5(b"hello\n").hexdigest()
    assert f.sha256sum == hashlib.sha256(b"hello\n").hexdigest()
    assert backend.file(str(tmp_path / "none")).sha256sum is None
