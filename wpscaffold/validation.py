"""
validation.py

Responsibility: Prompt validators.

Every validator takes the (already filtered) answer and returns `True` when it
is acceptable, or a human-readable message that is shown before the prompt is
asked again.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Callable, Union

ValidationResult = Union[bool, str]
Validator = Callable[[Any], ValidationResult]

_SLUG = re.compile(r"[a-z0-9_\-]+")
_PHP_NAMESPACE = re.compile(r"[A-Za-z0-9_\\]+")
_ALNUM_DASH = re.compile(r"[a-z0-9\-]+")
_ALNUM_UNDERSCORE = re.compile(r"[a-z0-9_]+")
# Absolute directory with a trailing slash, e.g. /home/required/www/
_DIRECTORY = re.compile(r"/([A-Za-z0-9_+\-]+/)*([A-Za-z0-9]+/)")
_UNIX_PATH = re.compile(r"^/$|(^(?=/)|^\.|^\.\.)(/(?=[^/\0])[^/\0]+)*/?$")
_HOST_LABEL = re.compile(r"(?!-)[A-Za-z0-9-]{1,63}(?<!-)")


def validate_not_empty(value: Any) -> ValidationResult:
    if value is None or not str(value).strip():
        return "A value is required."
    return True


def validate_slug(value: str) -> ValidationResult:
    if not value or not _SLUG.fullmatch(value):
        return "Only lowercase alphanumeric characters, dashes and underscores are allowed."
    return True


def validate_php_namespace(value: str) -> ValidationResult:
    if not value or not _PHP_NAMESPACE.fullmatch(value):
        return "Only alphanumeric characters, backslashes and underscores are allowed."
    return True


def validate_alphanumeric_dash(value: str) -> ValidationResult:
    if not value or not _ALNUM_DASH.fullmatch(value):
        return "Only lowercase alphanumeric characters and dashes are allowed."
    return True


def validate_alphanumeric_underscore(value: str) -> ValidationResult:
    if not value or not _ALNUM_UNDERSCORE.fullmatch(value):
        return "Only lowercase alphanumeric characters and underscores are allowed."
    return True


def validate_directory(value: str) -> ValidationResult:
    if not value or not _DIRECTORY.fullmatch(value):
        return "Invalid unix path."
    return True


def validate_unix_path(value: str) -> ValidationResult:
    if not value or not _UNIX_PATH.match(value):
        return "Invalid unix path."
    return True


def is_valid_hostname(value: str) -> bool:
    if not value or len(value) > 253:
        return False
    labels = value[:-1].split(".") if value.endswith(".") else value.split(".")
    return all(_HOST_LABEL.fullmatch(label) for label in labels)


def validate_hostname(value: str) -> ValidationResult:
    if not is_valid_hostname(value):
        return "Invalid hostname."
    return True


def validate_file(value: str) -> ValidationResult:
    path = Path(value).expanduser()
    if not path.exists():
        return "File does not exist."
    if not path.is_file():
        return "Path is not a file."
    return True
