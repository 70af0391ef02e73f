"""
plugin.py

Responsibility: `wp-generate wordpress-plugin`.

Creates a GitHub repository from the plugin template, clones it, renames the
placeholders, installs dependencies, builds, and pushes.
"""

from __future__ import annotations

import argparse
import shutil
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
from wpscaffold.replacer import replace_in_files
from wpscaffold.rulesets import example_block_rules, plugin_rules
from wpscaffold.steps import PipelineResult, Step, run_pipeline
from wpscaffold.textcase import kebab_case, pascal_case
from wpscaffold.validation import validate_not_empty, validate_php_namespace, validate_slug

TOOL = "wordpress-plugin"
TOPIC = "wordpress-plugin"

DEFAULT_INPUT: dict[str, Any] = {
    "plugin_name": "My Plugin",
    "plugin_description": "",
    "plugin_slug": "",
    "github_slug": "",
    "php_namespace": "",
    "delete_example_block": False,
    "private_repo": True,
}


def plugin_prompts(defaults: dict[str, Any], stored_token: str | None = None) -> list[Prompt]:
    return [
        token_prompt(stored_token),
        Prompt("plugin_name", "Enter the name of the plugin:", default=defaults["plugin_name"], validate=validate_not_empty),
        Prompt("plugin_description", "Enter the description of the plugin:", default=defaults["plugin_description"]),
        Prompt(
            "plugin_slug",
            "Enter the slug of the plugin:",
            default=lambda a: defaults["plugin_slug"] or kebab_case(a["plugin_name"]),
            validate=validate_slug,
        ),
        Prompt(
            "github_slug",
            "Enter the slug of the GitHub repo:",
            default=lambda a: defaults["github_slug"] or a["plugin_slug"],
            validate=validate_slug,
        ),
        Prompt(
            "php_namespace",
            "Enter the PHP namespace of the plugin:",
            default=lambda a: defaults["php_namespace"] or "Required\\" + pascal_case(a["plugin_slug"]),
            validate=validate_php_namespace,
        ),
        Prompt("delete_example_block", "Delete the example block?", kind="confirm", default=defaults["delete_example_block"]),
        Prompt("private_repo", "Private GitHub repo?", kind="confirm", default=defaults["private_repo"]),
    ]


def remove_example_block(state: Provisioned) -> None:
    shutil.rmtree(state.directory / "assets" / "src" / "blocks" / "example", ignore_errors=True)
    for rule_set in example_block_rules():
        replace_in_files(state.directory, rule_set.globs, rule_set.rules)


def plugin(ctx: Context, args: argparse.Namespace) -> PipelineResult:
    stored_token = ctx.credentials.get()
    show_intro(ctx, "WordPress plugin", skip=args.skip_intro, stored_token=stored_token)

    defaults = defaults_with_last_input(ctx, TOOL, DEFAULT_INPUT)
    answers = ctx.prompts.collect(plugin_prompts(defaults, stored_token))
    ctx.console.print()

    token = answers.pop("github_token")
    ctx.credentials.update(stored_token, token)
    ctx.config.remember(TOOL, answers)
    ctx.config.save()

    settings = ctx.config.settings
    owner = settings.github_organization
    client = ctx.github(token)
    ensure_repository_absent(client, owner, answers["github_slug"])

    state = Provisioned(directory=ctx.cwd / answers["plugin_slug"])
    ensure_directory_absent(state.directory)

    delete_example_block = bool(answers["delete_example_block"])
    rules = plugin_rules(
        name=answers["plugin_name"],
        slug=answers["plugin_slug"],
        namespace=answers["php_namespace"],
        description=answers["plugin_description"],
        github_slug=answers["github_slug"],
    )

    steps = provisioning_steps(
        ctx,
        client,
        state,
        template=settings.plugin_template_repo,
        owner=owner,
        name=answers["github_slug"],
        private=bool(answers["private_repo"]),
        description=answers["plugin_description"],
        topics=[TOPIC],
    )
    if delete_example_block:
        steps.append(Step("Removing example block", "Could not remove example block.", lambda: remove_example_block(state)))
    steps += [
        rename_step(state, "Renaming plugin files", [rules]),
        commit_step(state, "Update plugin name"),
        shell_step(ctx, state, "Installing dependencies", "Could not install dependencies.", ["npm", "install"]),
        shell_step(
            ctx,
            state,
            "Linting and fixing JavaScript files",
            "Could not lint/fix JavaScript files.",
            ["npm", "run", "lint-js:fix"],
        ),
    ]
    # The build has nothing to compile once the example block is gone.
    if not delete_example_block:
        steps += [
            shell_step(ctx, state, "Building plugin", "Could not build plugin.", ["npm", "run", "build"]),
            commit_step(state, "Build"),
        ]

    result = run_pipeline(ctx.runner, steps)
    if result.ok:
        print_done(ctx, state)
    return result
