"""Compilation Executor.

This module runs the assembled ikvmc command and interprets its result.

Design:
    - Wraps subprocess.run, blocking until ikvmc exits
    - Captures stdout/stderr through temporary files so memory use is
      bounded by ``max_output_bytes`` per stream
    - Forwards captured stdout to the info log and stderr to the warning log
    - Distinguishes "could not launch" from "ran and failed"
    - Optionally escalates ``Warning <code>:`` lines to a build failure
"""

import logging
import os
import re
import subprocess
import tempfile
from dataclasses import dataclass
from typing import IO, Iterable, List, Optional

from ..errors import IkvmBuildError
from .command_builder import CommandInvocation

logger = logging.getLogger(__name__)

DEFAULT_MAX_OUTPUT_BYTES = 16 * 1024 * 1024

# A warning line starts with the marker followed by a one-word code and a colon
WARNING_PATTERN = re.compile(r"^Warning ([^\s:]+):", re.MULTILINE)


class InvocationError(IkvmBuildError):
    """Raised when ikvmc cannot be launched at all."""

    pass


class CompilationError(IkvmBuildError):
    """Raised when ikvmc exits with a non-zero status."""

    pass


class WarningEscalationError(IkvmBuildError):
    """Raised when ikvmc succeeded but reported warnings that must fail the build."""

    def __init__(self, codes: List[str]):
        self.codes = codes
        count = len(codes)
        super().__init__(
            f"{count} warning{'s' if count > 1 else ''} detected in ikvmc output: "
            + f"{', '.join(codes)}."
        )


@dataclass
class ExecutionResult:
    """Result of one ikvmc run."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


def find_warning_codes(outputs: Iterable[str]) -> List[str]:
    """Collect distinct warning codes from captured output.

    Args:
        outputs: Captured output buffers (stdout, stderr)

    Returns:
        Sorted list of distinct codes (case-sensitive)
    """
    codes = set()
    for output in outputs:
        if output:
            codes.update(WARNING_PATTERN.findall(output))
    return sorted(codes)


class CompilationExecutor:
    """Executes ikvmc invocations.

    Example:
        executor = CompilationExecutor(escalate_warnings=True)
        result = executor.execute(invocation)
    """

    def __init__(
        self,
        escalate_warnings: bool = False,
        timeout: Optional[float] = None,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES
    ):
        """Initialize compilation executor.

        Args:
            escalate_warnings: Treat ikvmc warnings as errors
            timeout: Seconds before ikvmc is killed (None waits forever)
            max_output_bytes: Maximum bytes kept per captured stream
        """
        self.escalate_warnings = escalate_warnings
        self.timeout = timeout
        self.max_output_bytes = max_output_bytes

    def run(self, invocation: CommandInvocation) -> ExecutionResult:
        """Run the invocation and capture its output.

        Args:
            invocation: Command and environment overrides

        Returns:
            ExecutionResult with exit code and captured output

        Raises:
            InvocationError: If the process cannot be started
            CompilationError: If the process times out
        """
        env = None
        if invocation.env:
            env = dict(os.environ)
            env.update(invocation.env)

        program = invocation.argv[0] if invocation.argv else "<empty command>"

        with tempfile.TemporaryFile() as out_f, tempfile.TemporaryFile() as err_f:
            try:
                completed = subprocess.run(
                    invocation.argv,
                    stdout=out_f,
                    stderr=err_f,
                    env=env,
                    timeout=self.timeout,
                )
            except subprocess.TimeoutExpired as e:
                raise CompilationError(f"ikvmc timed out after {self.timeout}s") from e
            except (OSError, ValueError) as e:
                raise InvocationError(f"Executing ikvmc failed: unable to launch {program}: {e}") from e

            return ExecutionResult(
                returncode=completed.returncode,
                stdout=self._read_bounded(out_f),
                stderr=self._read_bounded(err_f),
            )

    def execute(self, invocation: CommandInvocation) -> ExecutionResult:
        """Run ikvmc, log its output and enforce the result.

        Args:
            invocation: Command and environment overrides

        Returns:
            ExecutionResult of a successful run

        Raises:
            InvocationError: If ikvmc cannot be launched
            CompilationError: If ikvmc exits non-zero
            WarningEscalationError: If warnings are found while escalation
                is enabled
        """
        logger.debug(f"CMD: {invocation}")
        result = self.run(invocation)

        if result.stdout:
            logger.info(result.stdout.rstrip("\n"))
        if result.stderr:
            logger.warning(result.stderr.rstrip("\n"))

        if result.returncode != 0:
            raise CompilationError(
                f"ikvmc failed with exit code {result.returncode}; see above output."
            )

        self.check_for_warnings(result)
        return result

    def check_for_warnings(self, result: ExecutionResult) -> None:
        """Fail on warning markers when escalation is enabled.

        Raises:
            WarningEscalationError: If any warning code was found
        """
        if not self.escalate_warnings:
            return
        codes = find_warning_codes([result.stdout, result.stderr])
        if codes:
            raise WarningEscalationError(codes)

    def _read_bounded(self, stream: IO[bytes]) -> str:
        stream.seek(0)
        data = stream.read(self.max_output_bytes + 1)
        truncated = len(data) > self.max_output_bytes
        text = data[: self.max_output_bytes].decode("utf-8", errors="replace")
        if truncated:
            text += f"\n[output truncated after {self.max_output_bytes} bytes]\n"
        return text
