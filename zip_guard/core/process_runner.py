# Copyright 2026 Cisco Systems, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""
Bounded, deadlock-free execution of external commands.

A child writing to two pipes can block forever if the parent sits in a
blocking read on one pipe while the other fills up. ``ProcessRunner`` never
does that: both pipes are registered with one selector and read only when
the selector reports them ready, in chunks of at most ``read_chunk_size``
bytes. No shell is involved; argv goes straight to ``exec``.

Usage
-----
    from zip_guard.core.process_runner import ProcessRunner

    runner = ProcessRunner(timeout=20.0, max_output_bytes=1024 * 1024)
    result = runner.execute(["unzip", "-v"])
    print(result.exit_code, result.stdout_text)
"""

from __future__ import annotations

import logging
import os
import selectors
import subprocess
from collections.abc import Iterable, Mapping, Sequence

from ..config.constants import ZipGuardConstants
from .exceptions import CommandNotFoundError, OutputLimitExceededError, SubprocessTimeoutError
from .models import ProcessResult

logger = logging.getLogger(__name__)


class ProcessRunner:
    """Runs one external command per ``execute()`` call.

    The runner keeps no state between calls, so one instance can be shared
    by many callers.
    """

    def __init__(
        self,
        timeout: float = ZipGuardConstants.DEFAULT_SUBPROCESS_TIMEOUT,
        max_output_bytes: int = ZipGuardConstants.DEFAULT_MAX_OUTPUT_BYTES,
        read_chunk_size: int = ZipGuardConstants.DEFAULT_READ_CHUNK_SIZE,
        log: logging.Logger | None = None,
    ):
        """
        Args:
            timeout: Seconds to wait for either pipe to become readable (and
                for the child to exit once both pipes are closed).
            max_output_bytes: Maximum combined stdout + stderr bytes per call.
            read_chunk_size: Maximum bytes taken from a pipe per read.
            log: Logger to use instead of the module logger.
        """
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        if max_output_bytes <= 0:
            raise ValueError(f"max_output_bytes must be positive, got {max_output_bytes}")
        if read_chunk_size <= 0:
            raise ValueError(f"read_chunk_size must be positive, got {read_chunk_size}")
        self.timeout = timeout
        self.max_output_bytes = max_output_bytes
        self.read_chunk_size = read_chunk_size
        self.log = log or logger

    def execute(self, argv: Sequence[str | os.PathLike], env: Mapping[str, str] | None = None) -> ProcessResult:
        """
        Run *argv* to completion and capture its output.

        Args:
            argv: Command and arguments. ``argv[0]`` is looked up on ``PATH``.
            env: Environment for the child. None inherits the current one.

        Returns:
            ProcessResult with the exit code and both output streams

        Raises:
            CommandNotFoundError: The executable could not be started.
            SubprocessTimeoutError: No output for ``timeout`` seconds.
            OutputLimitExceededError: More than ``max_output_bytes`` of output.
        """
        args = tuple(os.fspath(arg) for arg in argv)
        if not args:
            raise ValueError("argv must name a command")

        self.log.debug("Running %s", args)
        try:
            proc = subprocess.Popen(
                args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                shell=False,
                close_fds=True,
                env=dict(env) if env is not None else None,
            )
        except OSError as e:
            raise CommandNotFoundError(f"Could not start command {args[0]!r}: {e}", args) from e

        try:
            stdout, stderr = self._drain(proc, args)
            try:
                exit_code = proc.wait(timeout=self.timeout)
            except subprocess.TimeoutExpired as e:
                raise SubprocessTimeoutError(
                    f"{args[0]} closed its output but did not exit within {self.timeout}s", args, self.timeout
                ) from e
        finally:
            self._reap(proc)

        self.log.debug(
            "%s exited with %d (%d bytes stdout, %d bytes stderr)", args[0], exit_code, len(stdout), len(stderr)
        )
        return ProcessResult(args=args, exit_code=exit_code, stdout=stdout, stderr=stderr)

    def _drain(self, proc: subprocess.Popen, args: tuple[str, ...]) -> tuple[bytes, bytes]:
        """Read both pipes until the child closes them, enforcing the limits."""
        buffers = {"stdout": bytearray(), "stderr": bytearray()}
        total = 0

        with selectors.DefaultSelector() as selector:
            selector.register(proc.stdout, selectors.EVENT_READ, "stdout")
            selector.register(proc.stderr, selectors.EVENT_READ, "stderr")

            while selector.get_map():
                ready = selector.select(timeout=self.timeout)
                if not ready:
                    self.log.warning("%s produced no output for %ss, killing it", args[0], self.timeout)
                    raise SubprocessTimeoutError(
                        f"{args[0]} produced no output for {self.timeout}s", args, self.timeout
                    )

                for key, _events in ready:
                    chunk = os.read(key.fd, self.read_chunk_size)
                    if not chunk:
                        # EOF
                        selector.unregister(key.fileobj)
                        continue

                    buffers[key.data].extend(chunk)
                    total += len(chunk)
                    if total > self.max_output_bytes:
                        self.log.warning(
                            "%s exceeded the output limit of %d bytes, killing it", args[0], self.max_output_bytes
                        )
                        raise OutputLimitExceededError(
                            f"{args[0]} wrote more than {self.max_output_bytes} bytes",
                            args,
                            self.max_output_bytes,
                        )

        return bytes(buffers["stdout"]), bytes(buffers["stderr"])

    def _reap(self, proc: subprocess.Popen) -> None:
        """Kill the child if it is still running, wait for it and close its pipes."""
        if proc.poll() is None:
            proc.kill()
        proc.wait()
        for stream in (proc.stdout, proc.stderr):
            if stream is not None:
                stream.close()


def environment_without(names: Iterable[str]) -> dict[str, str]:
    """Copy of the current environment with *names* removed."""
    drop = set(names)
    return {key: value for key, value in os.environ.items() if key not in drop}
