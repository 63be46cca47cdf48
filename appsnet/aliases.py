"""Host gateway aliases inside containers.

The managed network's gateway address is written into each container's
``/etc/hosts`` under the configured alias names, so workloads can reach the
host at a stable name. The edit is a small shell script run through
``docker exec``; images differ in which shell they ship (or ship none), so the
known shells are tried in order and a container without any is left alone.
"""

from __future__ import annotations

import asyncio
import logging
import re
import shlex
from dataclasses import dataclass
from enum import Enum

from .docker_ops import RUNTIME_ERRORS, DockerRuntime
from .models import ContainerRecord
from .settings import HOSTS_FILE, HostGatewayConfig

log = logging.getLogger(__name__)

_REGEX_SPECIAL_RE = re.compile(r"[.*+?^${}()|\[\]\\]")

SHELLS = ["/bin/sh", "sh", "/bin/ash", "ash"]
EXEC_USER = "0"


class ExecTimeout(Exception):
    pass


class ExecOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"  # ran, exited non-zero
    UNAVAILABLE = "unavailable"  # could not be created or started
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class ExecAttempt:
    command: list[str]
    outcome: ExecOutcome
    exit_code: int | None = None
    detail: str = ""


def escape_regex(value: str) -> str:
    return _REGEX_SPECIAL_RE.sub(lambda m: "\\" + m.group(0), value)


def build_alias_script(gateway_ip: str, aliases: list[str], hosts_file: str = HOSTS_FILE) -> str:
    """Shell lines appending ``<gateway_ip> <alias>`` for each alias not yet present.

    An alias counts as present when it appears as a whole whitespace-delimited
    token on some line, so re-running the script appends nothing. Both the grep
    pattern and the appended entry are single-quoted, so the alias reaches the
    file byte for byte.
    """
    path = shlex.quote(hosts_file)
    lines = []
    for alias in aliases:
        pattern = shlex.quote(f"(^|[[:space:]]){escape_regex(alias)}([[:space:]]|$)")
        entry = shlex.quote(f"{gateway_ip} {alias}")
        lines.append(f"grep -Eq {pattern} {path} || printf '%s\\n' {entry} >> {path}")
    return "\n".join(lines)


def shell_candidates(script: str) -> list[list[str]]:
    return [[shell, "-c", script] for shell in SHELLS]


async def run_container_exec(
    runtime: DockerRuntime,
    container_id: str,
    command: list[str],
    poll_interval_s: float = 0.1,
    timeout_s: float | None = None,
) -> int:
    """Run ``command`` detached as root and wait for its exit code.

    Without ``timeout_s`` the wait is unbounded. A missing exit code counts as 1.
    """
    exec_id = await runtime.exec_create(container_id, command, user=EXEC_USER)
    await runtime.exec_start(exec_id)

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout_s if timeout_s else None
    while True:
        info = await runtime.exec_inspect(exec_id)
        if not info.get("Running"):
            exit_code = info.get("ExitCode")
            return 1 if exit_code is None else int(exit_code)
        if deadline is not None and loop.time() >= deadline:
            raise ExecTimeout(f"exec {exec_id} still running after {timeout_s}s")
        await asyncio.sleep(poll_interval_s)


async def try_exec(
    runtime: DockerRuntime,
    container_id: str,
    command: list[str],
    poll_interval_s: float = 0.1,
    timeout_s: float | None = None,
) -> ExecAttempt:
    try:
        exit_code = await run_container_exec(runtime, container_id, command, poll_interval_s, timeout_s)
    except ExecTimeout as e:
        return ExecAttempt(command, ExecOutcome.TIMED_OUT, detail=str(e))
    except RUNTIME_ERRORS as e:
        return ExecAttempt(command, ExecOutcome.UNAVAILABLE, detail=f"{type(e).__name__}: {e}")
    outcome = ExecOutcome.SUCCEEDED if exit_code == 0 else ExecOutcome.FAILED
    return ExecAttempt(command, outcome, exit_code=exit_code)


async def run_shell_script(
    runtime: DockerRuntime,
    container_id: str,
    script: str,
    poll_interval_s: float = 0.1,
    timeout_s: float | None = None,
) -> bool:
    """Run ``script`` with the first shell that works. Returns True on exit code 0."""
    for command in shell_candidates(script):
        shell = command[0]
        attempt = await try_exec(runtime, container_id, command, poll_interval_s, timeout_s)
        if attempt.outcome is ExecOutcome.SUCCEEDED:
            return True
        if attempt.outcome is ExecOutcome.FAILED:
            log.debug(f"Shell command failed with exit code {attempt.exit_code}: {shell} -c <script>")
        elif attempt.outcome is ExecOutcome.UNAVAILABLE:
            log.debug(f"Shell command is unavailable: {shell} ({attempt.detail})")
        else:
            # A hung script would hang under the next shell too.
            log.debug(f"Shell command timed out: {shell} ({attempt.detail})")
            return False
    return False


async def inject_aliases(
    runtime: DockerRuntime,
    container: ContainerRecord,
    config: HostGatewayConfig,
    poll_interval_s: float = 0.1,
    timeout_s: float | None = None,
) -> bool:
    """Make sure every configured alias resolves to the gateway inside ``container``.

    Returns False without touching the container when the feature is off or the
    gateway is unknown. Failures are logged, never raised.
    """
    if not config.active:
        return False

    aliases = ", ".join(config.aliases)
    script = build_alias_script(config.gateway_ip, config.aliases)
    if not await run_shell_script(runtime, container.id, script, poll_interval_s, timeout_s):
        log.warning(f"Failed to add host gateway aliases ({aliases}) to container {container.id}")
        return False

    log.debug(f"Ensured host gateway aliases ({aliases}) for container {container.id}")
    return True
