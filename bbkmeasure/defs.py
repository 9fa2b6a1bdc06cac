"""Application identity: name, version, hardware model and operating system."""

from __future__ import annotations

import functools
import platform
import subprocess

APP_VERSION = "1.2.1"
BUILD_VERSION = 16
_BASE_NAME = "Bredbandskollen"
_MAX_INFO_LEN = 50

_SYSTEM_SUFFIXES = {
    "windows": " Windows",
    "android": " Android",
    "darwin": " Mac",
    "freebsd": " FreeBSD",
    "netbsd": " NetBSD",
    "openbsd": " OpenBSD",
    "bsdi": " BSDi",
    "bsd/os": " BSDi",
    "dragonfly": " DragonFly",
}

_MACHINE_SUFFIXES = {
    "arm": " ARM",
    "aarch64": " ARM64",
    "arm64": " ARM64",
    "i386": " i386",
    "i486": " i386",
    "i586": " i386",
    "i686": " i386",
    "x86": " i386",
    "amd64": " amd64",
    "x86_64": " amd64",
    "mips": " mips",
}


def _machine_suffix(machine: str) -> str:
    key = machine.lower()
    if key in _MACHINE_SUFFIXES:
        return _MACHINE_SUFFIXES[key]
    if key.startswith("armv"):
        return " ARM"
    if key.startswith("mips") and "64" not in key:
        return " mips"
    return ""


def app_name(system: str | None = None, machine: str | None = None) -> str:
    """Application name with operating system and architecture appended.

    ``system`` and ``machine`` default to those of the running host.
    """
    if system is None:
        system = platform.system()
    if machine is None:
        machine = platform.machine()
    name = _BASE_NAME + _SYSTEM_SUFFIXES.get(system.lower(), " Linux")
    return name + _machine_suffix(machine)


def _external_cmd(*args: str) -> str:
    """Run a command and return its output without trailing whitespace."""
    try:
        completed = subprocess.run(
            args, capture_output=True, text=True, check=False, timeout=10
        )
    except (OSError, subprocess.SubprocessError):
        return ""
    return completed.stdout.rstrip(" \t\r\n")


@functools.lru_cache(maxsize=None)
def hardware_model() -> str:
    """Short description of the host hardware, at most 50 characters."""
    system = platform.system()
    if system == "Darwin":
        model = _external_cmd("sysctl", "-n", "hw.model")
    elif system == "Windows":
        model = platform.processor()
    else:
        model = _external_cmd("uname", "-m") or platform.machine()
    return model[:_MAX_INFO_LEN]


@functools.lru_cache(maxsize=None)
def os_info() -> str:
    """Short description of the host operating system, at most 50 characters."""
    system = platform.system()
    if system == "Windows":
        version = platform.version()
        info = f"Windows {platform.release()}"
        if version:
            info += f" (Build {version.rsplit('.', 1)[-1]})"
        else:
            info = "Windows unknown"
        return info
    if system == "Darwin":
        release = platform.mac_ver()[0]
        return f"Version {release}" if release else "Version unknown"
    info = _external_cmd("uname", "-sr")
    if not info:
        info = f"{system} {platform.release()}".strip()
    return info[:_MAX_INFO_LEN]


APP_NAME = app_name()
USER_AGENT = f"{APP_NAME} {APP_VERSION}"