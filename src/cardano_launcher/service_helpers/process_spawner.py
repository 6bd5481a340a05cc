"""Create OS processes from process descriptions."""

from __future__ import annotations

import asyncio
import os
import subprocess
import sys
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

if TYPE_CHECKING:
    from ..service import StartService


def build_environment(extra_env: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Return the parent environment overlaid with ``extra_env``."""
    env = dict(os.environ)
    if extra_env:
        env.update({key: str(value) for key, value in extra_env.items()})
    return env


def _platform_kwargs() -> Dict[str, Any]:
    # A separate process group lets CTRL_BREAK_EVENT reach only this child.
    if sys.platform == "win32":
        return {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
    return {}


async def spawn_process(description: "StartService") -> asyncio.subprocess.Process:
    """
    Spawn ``description`` with piped stdout/stderr.

    Stdin is a pipe for processes with a shutdown handler (closing it asks the
    process to exit) and ``/dev/null`` otherwise.

    Raises:
        OSError: If the executable is missing or cannot be executed
    """
    stdin = asyncio.subprocess.PIPE if description.shutdown_handler else asyncio.subprocess.DEVNULL
    return await asyncio.create_subprocess_exec(
        description.command,
        *description.args,
        stdin=stdin,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        env=build_environment(description.extra_env),
        cwd=description.cwd,
        **_platform_kwargs(),
    )
