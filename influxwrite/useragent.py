"""User-Agent header values."""

from __future__ import annotations

import platform
import sys

VERSION = "2.14.0"

_OS_NAMES = {"win32": "windows", "cygwin": "windows"}
_ARCH_NAMES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
}


def user_agent_base() -> str:
    """Return the base User-Agent value with version, OS and architecture."""
    os_name = _OS_NAMES.get(sys.platform, sys.platform)
    machine = platform.machine().lower()
    arch = _ARCH_NAMES.get(machine, machine or "unknown")
    return f"influxwrite/{VERSION} ({os_name}; {arch})"


def format_user_agent(app_name: str) -> str:
    """Return the User-Agent value, with the application name appended if given."""
    base = user_agent_base()
    if app_name:
        return f"{base} {app_name}"
    return base