"""
wpscaffold package

Interactive command-line tools that bootstrap WordPress plugins, themes and
projects, manage pull requests across many repositories, and provision remote
hosting environments.

Key responsibilities are split across modules:
- `steps.py`: named, fatal-on-failure pipeline steps and best-effort fan-out
- `github_client.py`: isolated GitHub REST API interactions (template repos, search, contents)
- `prompts.py`: ordered, validated interactive input
- `replacer.py` / `rulesets.py`: placeholder renaming inside a local checkout
- `config.py`: persisted settings, last input and credential storage
- `cli.py`: argparse entry points for the four tools
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "1.0.0"
