"""Error output shared by CLI commands."""

from __future__ import annotations

import json
import sys
from typing import NoReturn

import click

from abr_orchestrator.cli.exit_codes import ExitCode


def error_exit(
    message: str,
    code: ExitCode | int,
    json_output: bool = False,
) -> NoReturn:
    """Print an error (plain or JSON) to stderr and exit with code."""
    code_name = code.name if isinstance(code, ExitCode) else "UNKNOWN_ERROR"

    if json_output:
        payload = {"status": "failed", "error": {"code": code_name, "message": message}}
        click.echo(json.dumps(payload), err=True)
    else:
        click.echo(f"Error: {message}", err=True)

    sys.exit(int(code))
