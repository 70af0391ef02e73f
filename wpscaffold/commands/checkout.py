"""
checkout.py

Responsibility: `wp-boilerplate checkout`, a plain clone of the plugin boilerplate.
"""

from __future__ import annotations

import argparse

from wpscaffold import console as fmt
from wpscaffold.commands.common import Context
from wpscaffold.prompts import Prompt
from wpscaffold.steps import PipelineResult, Step, run_pipeline

REPO_URL = "git@github.com:wearerequired/wordpress-plugin-boilerplate.git"


def checkout(ctx: Context, args: argparse.Namespace) -> PipelineResult:
    answers = ctx.prompts.collect(
        [
            Prompt(
                "directory_name",
                "Enter a directory name for the checkout (leave empty for current directory)",
                default="wordpress-plugin-boilerplate",
            )
        ]
    )
    name = str(answers["directory_name"] or "").strip().rstrip("/")
    destination = ctx.cwd / name if name else ctx.cwd

    result = run_pipeline(
        ctx.runner,
        [Step("Cloning", "Checkout failed.", lambda: ctx.clone_url(REPO_URL, destination))],
    )
    if result.ok:
        ctx.console.print(fmt.success(f"\n✅  Checkout done in {destination}"))
    return result
