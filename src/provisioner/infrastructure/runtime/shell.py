"""Shell string construction for command chains.

All interpolation of paths into a shell string goes through
:func:`shell_escape`. Everything else (environment variables, the log
read-back) is passed as an argument vector and never touches a shell.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Mapping, Sequence
from datetime import datetime

from provisioner.domain.models.base import utc_now


# Characters that change meaning inside an unquoted bash word.
SHELL_SPECIAL_PATTERN = re.compile(r"([\"\s'$`\\])")
WHITESPACE_PATTERN = re.compile(r"\s")
CONTROL_CHARACTER_PATTERN = re.compile(r"[\x00-\x1f\x7f]")

# Forced on every invocation: no interactive prompts, no ANSI colour.
BASE_ENVIRONMENT: dict[str, str] = {
    "TF_IN_AUTOMATION": "true",
    "FORCE_COLOR": "0",
}

LOG_LEVEL = "INFO"


def shell_escape(value: str) -> str:
    """Backslash-escape quotes, whitespace, ``$``, backticks and backslashes."""
    return SHELL_SPECIAL_PATTERN.sub(r"\\\1", value)


def build_command_chain(workspace_path: str, commands: Sequence[str]) -> str:
    """Return ``( cd <path> && cmd1 && cmd2 ) 2>&1``.

    Paths with control characters are rejected; bash drops an escaped newline.

    The redirection wraps the whole chain so that the error stream of every
    command lands in the success stream in the order it was written.
    """
    if not commands:
        raise ValueError("At least one command is required")
    if CONTROL_CHARACTER_PATTERN.search(workspace_path):
        raise ValueError(f"Workspace path contains control characters: {workspace_path!r}")
    chain = " && ".join([f"cd {shell_escape(workspace_path)}", *commands])
    return f"( {chain} ) 2>&1"


def supports_log_file(workspace_path: str) -> bool:
    return not WHITESPACE_PATTERN.search(workspace_path)


def log_file_name(now: datetime | None = None) -> str:
    """Unique, timestamped name of a verbose log file."""
    stamp = (now or utc_now()).strftime("%Y%m%d%H%M%S")
    return f"tofu_{stamp}_{uuid.uuid4().hex[:8]}.log"


def log_file_path(workspace_path: str, name: str) -> str:
    return f"{workspace_path.rstrip('/')}/{name}"


def logging_environment(log_path: str) -> dict[str, str]:
    return {"TF_LOG": LOG_LEVEL, "TF_LOG_PATH": log_path}


def environment_flags(environment: Mapping[str, str]) -> list[str]:
    """``-e KEY=VALUE`` pairs for ``docker exec``."""
    flags: list[str] = []
    for key, value in environment.items():
        flags.extend(["-e", f"{key}={value}"])
    return flags
