"""Run ecosystem install commands as child processes."""

from __future__ import annotations

import asyncio
import logging
import shlex

logger = logging.getLogger(__name__)

# Shell convention for "command not found"
EXIT_COMMAND_NOT_FOUND = 127


class SubprocessRunner:
    """Runs commands with stdin, stdout and stderr inherited from this process.

    The child's output goes straight to the user's terminal. Only the exit
    code is observed. There is no timeout: once started, a command runs
    until it exits. Satisfies the CommandRunner protocol structurally.
    """

    @classmethod
    def create(cls) -> SubprocessRunner:
        """Create the production runner."""
        return cls()

    async def run(self, argv: list[str]) -> int:
        """Run ``argv`` to completion and return its exit code."""
        logger.debug("Running: %s", shlex.join(argv))
        try:
            process = await asyncio.create_subprocess_exec(*argv)
        except FileNotFoundError:
            logger.error("Command not found: %s", argv[0])
            return EXIT_COMMAND_NOT_FOUND
        except PermissionError as e:
            logger.error("Cannot execute %s: %s", argv[0], e)
            return EXIT_COMMAND_NOT_FOUND
        returncode = await process.wait()
        logger.debug("%s exited with %s", argv[0], returncode)
        return returncode
