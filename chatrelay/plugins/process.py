"""Async subprocess helper shared by the plugin backends."""

import asyncio
from dataclasses import dataclass
from typing import Dict, Optional, Sequence


@dataclass
class ProcessResult:
    returncode: int
    stdout: str
    stderr: str


async def run_process(
    args: Sequence[str],
    stdin_text: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> ProcessResult:
    """Run ``args``, feed ``stdin_text`` and collect output.

    On timeout or cancellation the child is killed before the error propagates.
    """
    proc = await asyncio.create_subprocess_exec(
        *args,
        stdin=asyncio.subprocess.PIPE if stdin_text is not None else asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        env=env,
    )
    payload = stdin_text.encode("utf-8") if stdin_text is not None else None
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(payload), timeout=timeout)
    except (asyncio.TimeoutError, asyncio.CancelledError):
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        await proc.wait()
        raise
    return ProcessResult(
        returncode=proc.returncode,
        stdout=(stdout or b"").decode("utf-8", errors="replace"),
        stderr=(stderr or b"").decode("utf-8", errors="replace"),
    )
