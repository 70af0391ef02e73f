"""Case conversions used to derive slugs, PHP namespaces and identifiers."""

from __future__ import annotations

import re

_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")
_ACRONYM_WORD = re.compile(r"([A-Z])([A-Z][a-z])")
_SEPARATORS = re.compile(r"[^A-Za-z0-9]+")


def split_words(text: str) -> list[str]:
    text = _LOWER_UPPER.sub(r"\1 \2", text)
    text = _ACRONYM_WORD.sub(r"\1 \2", text)
    return [w for w in _SEPARATORS.split(text) if w]


def kebab_case(text: str) -> str:
    return "-".join(w.lower() for w in split_words(text))


def snake_case(text: str) -> str:
    return "_".join(w.lower() for w in split_words(text))


def pascal_case(text: str) -> str:
    return "".join(w[:1].upper() + w[1:].lower() for w in split_words(text))


def camel_case(text: str) -> str:
    pascal = pascal_case(text)
    return pascal[:1].lower() + pascal[1:]
