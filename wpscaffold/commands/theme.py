"""
theme.py

Responsibility: `wp-generate wordpress-theme`.
"""

from __future__ import annotations

import argparse
from typing import Any

from wpscaffold.commands.common import (
    Context,
    Provisioned,
    commit_step,
    defaults_with_last_input,
    ensure_directory_absent,
    ensure_repository_absent,
    print_done,
    provisioning_steps,
    rename_step,
    shell_step,
    show_intro,
    token_prompt,
)
from wpscaffold.prompts import Prompt
from wpscaffold.rulesets import theme_rules
from wpscaffold.steps import PipelineResult, run_pipeline
from wpscaffold.textcase import kebab_case, pascal_case
from wpscaffold.validation import validate_not_empty, validate_php_namespace, validate_slug

TOOL = "wordpress-theme"
TOPIC = "wordpress-theme"

DEFAULT_INPUT: dict[str, Any] = {
    "theme_name": "My Theme",
    "theme_description": "",
    "theme_slug": "",
    "github_slug": "",
    "php_namespace": "",
    "private_repo": True,
}


def default_namespace(slug: str) -> str:
    return "Required\\" + pascal_case(slug.replace("-theme", "")) + "\\Theme"


def theme_prompts(defaults: dict[str, Any], stored_token: str | None = None) -> list[Prompt]:
    return [
        token_prompt(stored_token),
        Prompt("theme_name", "Enter the name of the theme:", default=defaults["theme_name"], validate=validate_not_empty),
        Prompt("theme_description", "Enter the description of the theme:", default=defaults["theme_description"]),
        Prompt(
            "theme_slug",
            "Enter the slug of the theme:",
            default=lambda a: defaults["theme_slug"] or kebab_case(a["theme_name"]),
            validate=validate_slug,
        ),
        Prompt(
            "php_namespace",
            "Enter the PHP namespace of the theme:",
            default=lambda a: defaults["php_namespace"] or default_namespace(a["theme_slug"]),
            validate=validate_php_namespace,
        ),
        Prompt(
            "github_slug",
            "Enter the slug of the GitHub repo:",
            default=lambda a: defaults["github_slug"] or a["theme_slug"],
            validate=validate_slug,
        ),
        Prompt("private_repo", "Private GitHub repo?", kind="confirm", default=defaults["private_repo"]),
    ]


def theme(ctx: Context, args: argparse.Namespace) -> PipelineResult:
    stored_token = ctx.credentials.get()
    show_intro(ctx, "WordPress theme", skip=args.skip_intro, stored_token=stored_token)

    defaults = defaults_with_last_input(ctx, TOOL, DEFAULT_INPUT)
    answers = ctx.prompts.collect(theme_prompts(defaults, stored_token))
    ctx.console.print()

    token = answers.pop("github_token")
    ctx.credentials.update(stored_token, token)
    ctx.config.remember(TOOL, answers)
    ctx.config.save()

    settings = ctx.config.settings
    owner = settings.github_organization
    client = ctx.github(token)
    ensure_repository_absent(client, owner, answers["github_slug"])

    state = Provisioned(directory=ctx.cwd / answers["theme_slug"])
    ensure_directory_absent(state.directory)

    rules = theme_rules(
        name=answers["theme_name"],
        slug=answers["theme_slug"],
        namespace=answers["php_namespace"],
        description=answers["theme_description"],
        github_slug=answers["github_slug"],
    )
    steps = provisioning_steps(
        ctx,
        client,
        state,
        template=settings.theme_template_repo,
        owner=owner,
        name=answers["github_slug"],
        private=bool(answers["private_repo"]),
        description=answers["theme_description"],
        topics=[TOPIC],
    )
    steps += [
        rename_step(state, "Renaming theme files", [rules]),
        commit_step(state, "Update theme name"),
        shell_step(ctx, state, "Installing dependencies", "Could not install dependencies.", ["npm", "install"]),
        shell_step(ctx, state, "Building theme", "Could not build theme.", ["npm", "run", "build"]),
        commit_step(state, "Build"),
    ]

    result = run_pipeline(ctx.runner, steps)
    if result.ok:
        print_done(ctx, state)
    return result
