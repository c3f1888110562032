"""Running COMMAND inputs as child processes."""

import json
import shlex
import subprocess
from typing import Any, Dict, Optional

from .errors import CommandError
from .jsonio import loads_strict


def decode_command_output(stdout: str) -> Any:
    """Interpret a command's stdout.

    Trailing whitespace is trimmed; the rest is parsed as JSON if
    possible and returned as a plain string otherwise.
    """
    output = stdout.rstrip()
    try:
        return loads_strict(output)
    except ValueError:
        return output


class CommandRunner:
    """Executes command lines without a shell, exchanging JSON over stdio.

    Attributes:
        timeout: Seconds to wait for each command (None = no limit)
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout = timeout

    def run(
        self,
        input_name: str,
        command: str,
        context: Any,
        pass_stdin: bool = True,
    ) -> Any:
        """Run a command and return its decoded output.

        Args:
            input_name: Name of the input being resolved (for errors)
            command: Command line, split with shell quoting rules
            context: Value serialized to the child's stdin
            pass_stdin: Whether to send context at all

        Returns:
            Parsed JSON output, or the trimmed output text

        Raises:
            CommandError: If the command cannot be parsed or started, its
                stdout is not UTF-8, or it exits with a non-zero status
        """
        try:
            argv = shlex.split(command)
        except ValueError as e:
            raise CommandError(input_name, command, f"failed to parse command: {e}")
        if not argv:
            raise CommandError(input_name, command, "empty command")

        kwargs: Dict[str, Any] = {
            "stdout": subprocess.PIPE,
            "text": True,
            "encoding": "utf-8",
            "timeout": self.timeout,
        }
        if pass_stdin:
            try:
                kwargs["input"] = json.dumps(
                    context, ensure_ascii=False, allow_nan=False
                )
            except (ValueError, TypeError) as e:
                raise CommandError(
                    input_name, command, f"context is not valid JSON: {e}"
                )
        else:
            kwargs["stdin"] = subprocess.DEVNULL

        try:
            process = subprocess.run(argv, **kwargs)
        except subprocess.TimeoutExpired:
            raise CommandError(
                input_name, command, f"command timed out after {self.timeout} seconds"
            )
        except OSError as e:
            raise CommandError(input_name, command, f"failed to run command: {e}")
        except UnicodeDecodeError as e:
            raise CommandError(
                input_name, command, f"couldn't read command stdout: {e}"
            )

        if process.returncode != 0:
            raise CommandError(
                input_name,
                command,
                f"exit status {process.returncode}",
                returncode=process.returncode,
            )

        return decode_command_output(process.stdout or "")
