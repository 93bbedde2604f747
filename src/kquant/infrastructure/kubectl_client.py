"""kubectl execution helpers for reading cluster state."""

import json
import shlex
import subprocess
from collections.abc import Sequence
from typing import Any, cast

from kquant.logging import LOG


class KubectlError(RuntimeError):
    """Raised when kubectl command execution fails."""


def _run_kubectl(
    command: str, *, global_args: Sequence[str]
) -> subprocess.CompletedProcess[str]:
    args = ["kubectl", *global_args, *shlex.split(command), "-o", "json"]
    LOG.debug("Running %s", shlex.join(args))
    try:
        return subprocess.run(
            args,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as exc:
        raise KubectlError("kubectl executable not found on PATH") from exc
    except subprocess.CalledProcessError as exc:
        stderr = exc.stderr.strip() if exc.stderr else str(exc)
        raise KubectlError(f"kubectl command failed: {stderr}") from exc


def kubectl_json(command: str, *, global_args: Sequence[str] = ()) -> dict[str, Any]:
    """Execute kubectl command and parse JSON output."""
    result = _run_kubectl(command, global_args=global_args)
    try:
        return cast(dict[str, Any], json.loads(result.stdout) if result.stdout else {})
    except json.JSONDecodeError as exc:
        raise KubectlError(f"kubectl returned invalid JSON: {exc}") from exc
