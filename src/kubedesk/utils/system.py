"""System utility checks."""

from __future__ import annotations

import shutil
import subprocess


def check_kubectl_cli(binary: str = "kubectl") -> tuple[bool, str]:
    """Check if kubectl is installed and return its client version."""
    kubectl_path = shutil.which(binary)
    if not kubectl_path:
        return False, f"{binary} not found. Install kubectl and make sure it is on PATH."
    try:
        result = subprocess.run(
            [binary, "version", "--client"],
            capture_output=True,
            text=True,
            timeout=10,
        )
        version = result.stdout.strip().splitlines()[0] if result.stdout.strip() else result.stderr.strip()
        return True, version
    except subprocess.TimeoutExpired:
        return False, "kubectl version check timed out"
    except Exception as e:
        return False, f"Error checking kubectl: {e}"
