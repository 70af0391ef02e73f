"""
merge_pr.py

Responsibility: `repo-management merge-pr` and `repo-management close-pr`.

Both search pull requests, let the operator pick some, and then act on every
selected pull request concurrently. One pull request failing is reported and
does not affect the others.

Merging re-runs `composer install` on the PR branch first (the lock file of a
dependency update PR may need vendor changes committed) and squash-merges.
"""

from __future__ import annotations

import argparse
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Callable

from rich.markup import escape

from wpscaffold import console as fmt
from wpscaffold.commands.common import Context, search_pull_requests
from wpscaffold.github_client import PullRequestRef
from wpscaffold.prompts import confirm_ready
from wpscaffold.shell import scoped_env
from wpscaffold.steps import PipelineResult, TargetResult, fan_out

logger = logging.getLogger(__name__)

TOOL = "merge-pr"
PUSH_SETTLE_SECONDS = 5
COMPOSER_INSTALL = ["composer", "install", "--no-progress", "--prefer-dist", "--no-ansi", "--no-interaction"]


def merge_pull_request(ctx: Context, token: str, base_branch: str, pr: PullRequestRef) -> str:
    """Check out `pr` in a temporary directory, commit composer changes if any, squash-merge."""
    gh_env = scoped_env({"GH_TOKEN": token})
    git_env = {**os.environ, "GH_TOKEN": token}
    checkout_dir = Path(tempfile.mkdtemp(prefix="merge-pr-"))
    try:
        ctx.shell(
            ["gh", "repo", "clone", pr.repo, ".", "--", "--single-branch", "--branch", base_branch],
            cwd=checkout_dir,
            env=gh_env,
        )
        ctx.shell(["gh", "pr", "checkout", str(pr.number)], cwd=checkout_dir, env=gh_env)
        ctx.shell(COMPOSER_INSTALL, cwd=checkout_dir)

        status = ctx.shell(["git", "status", "--porcelain", "--untracked-files=no"], cwd=checkout_dir, env=git_env)
        if status.strip():
            logger.info("%s: committing modified files", pr)
            ctx.shell(["git", "commit", "-am", "Add modified files"], cwd=checkout_dir, env=git_env)
            ctx.shell(["git", "push"], cwd=checkout_dir, env=git_env)
            # GitHub needs a moment to register the pushed commit on the PR.
            ctx.sleep(PUSH_SETTLE_SECONDS)

        return ctx.shell(
            ["gh", "pr", "merge", str(pr.number), "--squash", "--delete-branch"], cwd=checkout_dir, env=gh_env
        )
    finally:
        shutil.rmtree(checkout_dir, ignore_errors=True)


def close_pull_request(ctx: Context, token: str, pr: PullRequestRef) -> str:
    return ctx.shell(["gh", "pr", "close", pr.url, "--delete-branch"], env=scoped_env({"GH_TOKEN": token}))


def _report(ctx: Context, results: list[TargetResult[PullRequestRef]], done: str) -> None:
    for result in results:
        if result.ok:
            ctx.console.print(fmt.success(escape(f"[{result.target}] {done}")))
        else:
            ctx.console.print(fmt.error(escape(f"[{result.target}] {result.error}")))


def _bulk(
    ctx: Context,
    verb: str,
    done: str,
    action: Callable[[str, PullRequestRef], str],
) -> PipelineResult:
    token, selected = search_pull_requests(ctx, TOOL)
    ctx.console.print(f"\n{verb} the following {len(selected)} pull requests:")
    ctx.console.print(", ".join(str(pr) for pr in selected), markup=False)
    ctx.console.print()
    confirm_ready(ctx.asker)

    results = fan_out(selected, lambda pr: action(token, pr))
    _report(ctx, results, done)
    return PipelineResult(completed=[str(r.target) for r in results if r.ok])


def merge_pr(ctx: Context, args: argparse.Namespace) -> PipelineResult:
    base_branch = getattr(args, "base_branch", None) or "master"
    return _bulk(ctx, "Updating", "Merged.", lambda token, pr: merge_pull_request(ctx, token, base_branch, pr))


def close_pr(ctx: Context, args: argparse.Namespace) -> PipelineResult:
    return _bulk(ctx, "Closing", "Closed.", lambda token, pr: close_pull_request(ctx, token, pr))
