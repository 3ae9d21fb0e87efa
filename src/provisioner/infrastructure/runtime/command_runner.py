"""Command runners that execute tool chains inside a workspace."""

from __future__ import annotations

import asyncio
import os
import time
from abc import abstractmethod
from collections.abc import Mapping, Sequence

import structlog

from provisioner.domain.errors import SpawnError
from provisioner.domain.models.execution import ExecutionResult
from provisioner.domain.ports.services import CommandRunner
from provisioner.domain.services.summarizer import summarize
from provisioner.infrastructure.observability.metrics import (
    COMMAND_DURATION,
    COMMAND_EXECUTIONS_TOTAL,
    LOG_READS_TOTAL,
)
from provisioner.infrastructure.observability.tracing import get_tracer
from provisioner.infrastructure.runtime.shell import (
    BASE_ENVIRONMENT,
    build_command_chain,
    environment_flags,
    log_file_name,
    log_file_path,
    logging_environment,
    supports_log_file,
)


logger = structlog.get_logger(__name__)

DEFAULT_LOG_READ_TIMEOUT = 3.0
KILL_GRACE_SECONDS = 1.0


def _decode(data: bytes | None) -> str:
    return data.decode("utf-8", errors="replace") if data else ""


class SubprocessCommandRunner(CommandRunner):
    """Base runner spawning ``<shell> -c '<chain>'`` through an exec transport.

    Subclasses decide how an argument vector reaches the execution
    environment (``docker exec`` or the local machine).
    """

    def __init__(
        self,
        shell: str = "bash",
        log_read_timeout: float = DEFAULT_LOG_READ_TIMEOUT,
    ) -> None:
        self._shell = shell
        self._log_read_timeout = log_read_timeout
        self._tracer = get_tracer(__name__)

    @abstractmethod
    def _wrap(
        self,
        environment_id: str,
        environment: Mapping[str, str],
        argv: Sequence[str],
    ) -> tuple[list[str], dict[str, str] | None]:
        """Return the argv to spawn locally and the local process environment."""

    def _log_read_command(self, log_path: str) -> list[str]:
        return ["cat", log_path]

    # ------------------------------------------------------------------
    # CommandRunner
    # ------------------------------------------------------------------

    async def execute(
        self,
        environment_id: str,
        workspace_path: str,
        commands: Sequence[str],
        enable_logging: bool = False,
    ) -> ExecutionResult:
        environment = dict(BASE_ENVIRONMENT)
        log_path: str | None = None
        if enable_logging and supports_log_file(workspace_path):
            log_path = log_file_path(workspace_path, log_file_name())
            environment.update(logging_environment(log_path))

        script = build_command_chain(workspace_path, commands)
        argv, process_env = self._wrap(environment_id, environment, [self._shell, "-c", script])

        log = logger.bind(
            environment_id=environment_id,
            workspace=workspace_path,
            commands=list(commands),
        )

        with self._tracer.start_as_current_span("command_chain") as span:
            span.set_attribute("provisioner.environment_id", environment_id)
            span.set_attribute("provisioner.workspace", workspace_path)

            log.info("command_chain_started", log_path=log_path)
            started = time.monotonic()
            try:
                process = await asyncio.create_subprocess_exec(
                    *argv,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                    env=process_env,
                )
            except OSError as e:
                COMMAND_EXECUTIONS_TOTAL.labels(outcome="spawn_error").inc()
                log.exception("command_spawn_failed", argv=argv)
                raise SpawnError(f"Could not start {argv[0]}: {e}", argv) from e

            try:
                stdout_data, stderr_data = await process.communicate()
            except asyncio.CancelledError:
                process.kill()
                raise

            duration = time.monotonic() - started
            COMMAND_DURATION.observe(duration)

            returncode = process.returncode
            exit_code = returncode if returncode is not None and returncode >= 0 else None
            outcome = "killed" if exit_code is None else ("succeeded" if exit_code == 0 else "failed")
            COMMAND_EXECUTIONS_TOTAL.labels(outcome=outcome).inc()
            span.set_attribute("provisioner.exit_code", -1 if exit_code is None else exit_code)

            log.info(
                "command_chain_completed",
                exit_code=exit_code,
                outcome=outcome,
                duration_seconds=round(duration, 3),
            )

        stdout = _decode(stdout_data)
        stderr = _decode(stderr_data)
        log_file_content = (
            await self._read_log(environment_id, log_path) if log_path else ""
        )

        return ExecutionResult(
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            combined=f"{stdout}{stderr}",
            log_file_content=log_file_content,
            summary=summarize(stdout),
        )

    # ------------------------------------------------------------------
    # Log read-back
    # ------------------------------------------------------------------

    async def _read_log(self, environment_id: str, log_path: str) -> str:
        """Read the verbose log back within ``log_read_timeout`` seconds.

        Never raises: failures and timeouts degrade to an empty string.
        """
        argv, process_env = self._wrap(
            environment_id, {}, self._log_read_command(log_path)
        )
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
                env=process_env,
            )
        except OSError as e:
            LOG_READS_TOTAL.labels(result="error").inc()
            logger.warning("log_read_failed", log_path=log_path, error=str(e))
            return ""

        try:
            stdout_data, _ = await asyncio.wait_for(
                process.communicate(), timeout=self._log_read_timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            try:
                await asyncio.wait_for(process.wait(), timeout=KILL_GRACE_SECONDS)
            except asyncio.TimeoutError:
                logger.warning("log_reader_not_reaped", log_path=log_path, pid=process.pid)
            LOG_READS_TOTAL.labels(result="timeout").inc()
            logger.warning(
                "log_read_timeout",
                log_path=log_path,
                timeout_seconds=self._log_read_timeout,
            )
            return ""

        LOG_READS_TOTAL.labels(result="ok").inc()
        return _decode(stdout_data)


class DockerExecCommandRunner(SubprocessCommandRunner):
    """Runs chains inside a container with ``docker exec``.

    Environment variables are handed to docker as ``-e`` flags, never
    through the shell string.
    """

    def __init__(
        self,
        docker_binary: str = "docker",
        shell: str = "bash",
        log_read_timeout: float = DEFAULT_LOG_READ_TIMEOUT,
    ) -> None:
        super().__init__(shell=shell, log_read_timeout=log_read_timeout)
        self._docker = docker_binary

    def _wrap(
        self,
        environment_id: str,
        environment: Mapping[str, str],
        argv: Sequence[str],
    ) -> tuple[list[str], dict[str, str] | None]:
        return (
            [self._docker, "exec", "-i", *environment_flags(environment), environment_id, *argv],
            None,
        )


class LocalShellCommandRunner(SubprocessCommandRunner):
    """Runs chains on the local machine; the environment id is ignored.

    Used for development hosts where the tool is installed next to the
    service, and for exercising the runner without a container engine.
    """

    def _wrap(
        self,
        environment_id: str,  # noqa: ARG002
        environment: Mapping[str, str],
        argv: Sequence[str],
    ) -> tuple[list[str], dict[str, str] | None]:
        return list(argv), {**os.environ, **environment}
