"""
update_file.py

Responsibility: `repo-management update-file`.

Commit the same local file to one path in many repositories at once. Each
repository is handled independently: an unchanged file is skipped, a failed
commit is reported, and neither stops the others.
"""

from __future__ import annotations

import argparse
import base64
import os
from dataclasses import dataclass
from pathlib import Path

from rich.markup import escape

from wpscaffold import console as fmt
from wpscaffold.commands.common import Context, select_targets, token_prompt
from wpscaffold.github_client import GitHubClient
from wpscaffold.prompts import Prompt, confirm_ready
from wpscaffold.steps import Aborted, PipelineResult, TargetResult, fan_out
from wpscaffold.validation import validate_file, validate_not_empty

TOOL = "update-file"


@dataclass(frozen=True)
class FileUpdate:
    owner: str
    path: str
    branch: str
    message: str
    content: str  # base64


def update_prompts(last_input: dict, owner: str, stored_token: str | None = None) -> list[Prompt]:
    return [
        token_prompt(stored_token),
        Prompt("path", "Path:", default=last_input.get("path"), validate=validate_not_empty),
        Prompt("branch", "Branch:", default=last_input.get("branch") or "master", validate=validate_not_empty),
        Prompt("query", "Search query:", default=last_input.get("query") or f"user:{owner}", validate=validate_not_empty),
        Prompt(
            "commit_message",
            "Commit Message:",
            default=lambda a: f"Update {a['path']}.",
            validate=validate_not_empty,
        ),
        Prompt(
            "file",
            "File:",
            default=last_input.get("file"),
            validate=validate_file,
            filter=lambda value: os.path.expanduser(str(value or "")),
        ),
    ]


def update_repository(client: GitHubClient, update: FileUpdate, repo: str) -> str | None:
    """Commit `update` to `repo`. Returns the commit URL, or None when the content is unchanged."""
    existing = client.get_file(update.owner, repo, update.path, ref=update.branch)
    if existing is not None and existing.content == update.content:
        return None
    return client.put_file(
        update.owner,
        repo,
        update.path,
        content=update.content,
        message=update.message,
        branch=update.branch,
        sha=existing.sha if existing is not None else None,
    )


def report(ctx: Context, results: list[TargetResult[str]]) -> None:
    for result in results:
        if not result.ok:
            ctx.console.print(fmt.error(escape(f"[{result.target}] File not updated: {result.error}")))
        elif result.value is None:
            ctx.console.print(fmt.warning(escape(f"[{result.target}] Content is unchanged.")))
        else:
            ctx.console.print(fmt.success(escape(f"[{result.target}] File updated. {result.value}")))


def update_file(ctx: Context, args: argparse.Namespace) -> PipelineResult:
    stored_token = ctx.credentials.get()
    owner = ctx.config.settings.github_organization
    last_input = ctx.config.last_input(TOOL) or {}

    answers = ctx.prompts.collect(update_prompts(last_input, owner, stored_token))
    token = answers["github_token"]
    ctx.credentials.update(stored_token, token)
    ctx.config.remember(TOOL, {key: answers[key] for key in ("path", "branch", "file", "query")})
    ctx.config.save()

    client = ctx.github(token)
    repositories = ctx.runner.run(
        "Searching repositories", "Repo search failed.", lambda: client.search_repositories(answers["query"])
    )
    if not repositories:
        raise Aborted("No repositories found.")

    selected = select_targets(ctx, "Select repositories", [(name, name) for name in repositories])
    ctx.console.print(f"\nUpdating '{answers['path']}' for the following {len(selected)} repositories:")
    ctx.console.print(", ".join(selected), markup=False)
    ctx.console.print()
    confirm_ready(ctx.asker)

    update = FileUpdate(
        owner=owner,
        path=answers["path"],
        branch=answers["branch"],
        message=answers["commit_message"],
        content=base64.b64encode(Path(answers["file"]).read_bytes()).decode("ascii"),
    )
    results = fan_out(selected, lambda repo: update_repository(client, update, repo))
    report(ctx, results)
    return PipelineResult(completed=[r.target for r in results if r.ok])
