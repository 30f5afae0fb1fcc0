"""Newman engine: runs collections through the newman CLI.

Writes the collection and environment to a temporary directory, runs
``newman run`` with the JSON reporter and returns the exported report.
Exit codes are suppressed for assertion failures, so a non-zero exit
always means newman itself failed. A cancelled run kills the newman
child before the temporary directory is removed.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import shlex
import shutil
import tempfile
from pathlib import Path
from typing import Any

from postman_mcp.engines.base import BaseEngine, EngineRunOptions
from postman_mcp.errors import ExecutionError
from postman_mcp.models.config import ServerConfig
from postman_mcp.models.summary import RunSummary, dig

logger = logging.getLogger(__name__)

STDERR_TAIL_CHARS = 2000

COLLECTION_FILE = "collection.json"
ENVIRONMENT_FILE = "environment.json"
REPORT_FILE = "report.json"


def _tail(data: bytes) -> str:
    text = data.decode("utf-8", errors="replace").strip()
    return text[-STDERR_TAIL_CHARS:]


class NewmanEngine(BaseEngine):
    """Execute collections with the newman command-line runner.

    Args:
        command: The newman executable, optionally with leading arguments
            (e.g. "npx newman").
    """

    def __init__(self, command: str = "newman") -> None:
        self.command = shlex.split(command)

    @classmethod
    def from_config(cls, config: ServerConfig) -> NewmanEngine:
        return cls(command=config.newman_command)

    def build_args(
        self,
        collection_path: Path,
        environment_path: Path | None,
        report_path: Path,
        options: EngineRunOptions,
    ) -> list[str]:
        """Build the full newman argv for one run."""
        args = [*self.command, "run", str(collection_path)]
        if environment_path is not None:
            args += ["--environment", str(environment_path)]
        if options.scope:
            args += ["--folder", options.scope]
        args += [
            "--iteration-count", str(options.iteration_count),
            "--timeout-request", str(options.timeout_ms),
            "--reporters", "json",
            "--reporter-json-export", str(report_path),
            "--suppress-exit-code",
            "--disable-unicode",
        ]
        return args

    async def execute(
        self,
        collection: dict[str, Any],
        environment: dict[str, Any] | None,
        options: EngineRunOptions,
    ) -> RunSummary:
        workdir = await asyncio.to_thread(_prepare_workdir, collection, environment)
        try:
            return await self._run(workdir, environment is not None, options)
        finally:
            await asyncio.to_thread(shutil.rmtree, workdir, True)

    async def _run(
        self, workdir: Path, has_environment: bool, options: EngineRunOptions
    ) -> RunSummary:
        report_path = workdir / REPORT_FILE
        args = self.build_args(
            workdir / COLLECTION_FILE,
            workdir / ENVIRONMENT_FILE if has_environment else None,
            report_path,
            options,
        )
        logger.debug("Running %s", " ".join(args))

        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise ExecutionError(
                f"Newman executable not found: '{self.command[0]}'. "
                f"Install it with: npm install -g newman"
            ) from exc

        try:
            _stdout, stderr = await process.communicate()
        except (asyncio.CancelledError, Exception):
            await _kill(process)
            raise

        if process.returncode != 0:
            raise ExecutionError(
                f"Newman exited with code {process.returncode}: {_tail(stderr)}",
                returncode=process.returncode,
                stderr=_tail(stderr),
            )

        return await asyncio.to_thread(self._read_report, report_path, stderr)

    def _read_report(self, report_path: Path, stderr: bytes) -> RunSummary:
        """Load the JSON report and reject runs that newman aborted."""
        if not report_path.exists():
            raise ExecutionError(
                f"Newman produced no report: {_tail(stderr)}", stderr=_tail(stderr)
            )
        try:
            summary = json.loads(report_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ExecutionError(f"Newman report is not valid JSON: {exc}") from exc
        if not isinstance(summary, dict):
            raise ExecutionError("Newman report is not a JSON object")

        run_error = dig(summary, "run", "error")
        if run_error:
            message = dig(run_error, "message", default=run_error)
            raise ExecutionError(f"Newman run failed: {message}")
        return summary


def _prepare_workdir(
    collection: dict[str, Any], environment: dict[str, Any] | None
) -> Path:
    """Create a temp dir holding the collection (and environment) files."""
    workdir = Path(tempfile.mkdtemp(prefix="postman-mcp-"))
    try:
        (workdir / COLLECTION_FILE).write_text(json.dumps(collection), encoding="utf-8")
        if environment is not None:
            (workdir / ENVIRONMENT_FILE).write_text(
                json.dumps(environment), encoding="utf-8"
            )
    except OSError:
        shutil.rmtree(workdir, ignore_errors=True)
        raise
    return workdir


async def _kill(process: asyncio.subprocess.Process) -> None:
    """Kill an unfinished newman child and reap it."""
    if process.returncode is not None:
        return
    logger.warning("Stopping newman (pid %s) before it finished", process.pid)
    with contextlib.suppress(ProcessLookupError):
        process.kill()
    await process.wait()
