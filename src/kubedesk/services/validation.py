"""Validation of user-supplied kubectl arguments."""

from __future__ import annotations

import re

MAX_NAME_LENGTH = 253

DNS_LABEL_PATTERN = re.compile(r"[a-z0-9]([-a-z0-9]*[a-z0-9])?")
SAFE_CONTEXT_PATTERN = re.compile(r"[A-Za-z0-9][A-Za-z0-9._:@/-]*")


class ValidationError(ValueError):
    """Raised when a name would be unsafe or invalid to pass to kubectl."""


def _validate_dns_label(value: str, what: str) -> None:
    if not value:
        raise ValidationError(f"{what} is required")
    if len(value) > MAX_NAME_LENGTH or not DNS_LABEL_PATTERN.fullmatch(value):
        raise ValidationError(f"invalid {what}")


def validate_namespace(name: str) -> None:
    _validate_dns_label(name, "namespace name")


def validate_pod_name(name: str) -> None:
    _validate_dns_label(name, "pod name")


def validate_context_name(name: str) -> None:
    """Empty means "use the kubeconfig's current context" and is allowed."""
    if not name:
        return
    if name.startswith("-"):
        raise ValidationError("invalid context name")
    if len(name) > MAX_NAME_LENGTH or not SAFE_CONTEXT_PATTERN.fullmatch(name):
        raise ValidationError("invalid context name")


def with_context(args: list[str], context_name: str) -> list[str]:
    """Prefix args with ``--context <name>`` when a context is given."""
    validate_context_name(context_name)
    if not context_name:
        return list(args)
    return ["--context", context_name, *args]
