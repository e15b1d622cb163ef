"""GitHub Actions runner integration: inputs, outputs, and workflow commands."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import TextIO

GITHUB_OUTPUT_ENV_VAR = "GITHUB_OUTPUT"


def escape_data(value: str) -> str:
    """Escape a workflow command message."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def input_env_var(name: str) -> str:
    """Return the environment variable the runner uses for an action input."""
    return f"INPUT_{name.replace(' ', '_').upper()}"


def get_input(name: str) -> str:
    """Read an action input, trimmed; missing inputs read as empty."""
    return os.getenv(input_env_var(name), "").strip()


def issue_command(command: str, message: str, *, stream: TextIO | None = None) -> None:
    """Write one `::command::message` line to stdout."""
    target = stream or sys.stdout
    target.write(f"::{command}::{escape_data(message)}\n")
    target.flush()


def set_failed(message: str, *, stream: TextIO | None = None) -> None:
    """Report the run as failed; the caller sets the non-zero exit code."""
    issue_command("error", message, stream=stream)


def set_output(name: str, value: str) -> bool:
    """Append a step output to the GITHUB_OUTPUT file; return False outside a runner."""
    output_path = os.getenv(GITHUB_OUTPUT_ENV_VAR)
    if not output_path:
        return False
    if "\n" in value or "\r" in value:
        raise ValueError(f"Output '{name}' must be a single line.")
    with Path(output_path).open("a", encoding="utf-8") as output_file:
        output_file.write(f"{name}={value}\n")
    return True
