"""
project.py

Responsibility: `wp-generate wordpress-project`.

Unlike plugins and themes, a project is always a private repository, asks for
its hosting details, and ships no JavaScript build. The local `.env` gets a
fresh table prefix and fresh keys and salts.
"""

from __future__ import annotations

import argparse

from wpscaffold.commands.common import (
    Context,
    Provisioned,
    commit_step,
    ensure_directory_absent,
    ensure_repository_absent,
    print_done,
    provisioning_steps,
    show_intro,
    token_prompt,
)
from wpscaffold.prompts import Prompt
from wpscaffold.replacer import replace_in_files
from wpscaffold.rulesets import RuleSet, multisite_rules, project_rules, project_secret_rules
from wpscaffold.steps import PipelineResult, Step, run_pipeline
from wpscaffold.templating import render
from wpscaffold.textcase import kebab_case
from wpscaffold.validation import (
    validate_alphanumeric_dash,
    validate_alphanumeric_underscore,
    validate_directory,
    validate_hostname,
    validate_not_empty,
    validate_slug,
)

DEVELOPMENT_SUFFIX = ".required.test"


def development_host(value: str) -> str:
    """Normalize a development hostname to end in `.required.test` exactly once."""
    return value.replace(DEVELOPMENT_SUFFIX, "") + DEVELOPMENT_SUFFIX


def project_prompts(stored_token: str | None = None) -> list[Prompt]:
    return [
        token_prompt(stored_token),
        Prompt("project_name", "Enter the name of the project:", default="My Project", validate=validate_not_empty),
        Prompt("project_description", "Enter the description of the project:", default=""),
        Prompt(
            "project_slug",
            "Enter the project slug:",
            default=lambda a: kebab_case(a["project_name"]),
            validate=validate_slug,
        ),
        Prompt(
            "github_slug",
            "Enter the slug for the GitHub repo:",
            default=lambda a: a["project_slug"],
            validate=validate_slug,
        ),
    ]


def host_prompts() -> list[Prompt]:
    return [
        Prompt("is_multisite", "Is the project a multisite?", kind="confirm", default=False),
        Prompt(
            "project_host",
            "Enter the hostname of production (example.com):",
            default=lambda a: f"{a['project_slug']}.ch",
            validate=validate_hostname,
        ),
        Prompt(
            "staging_host",
            "Enter the hostname of staging (staging.example.com):",
            default=lambda a: "staging." + a["project_host"],
            validate=validate_hostname,
        ),
        Prompt(
            "development_host",
            "Enter the hostname for development (example.required.test):",
            default=lambda a: a["project_host"].split(".")[0],
            validate=validate_hostname,
            filter=development_host,
        ),
    ]


def hosting_prompts() -> list[Prompt]:
    return [
        Prompt(
            "hosting_hostname",
            "Enter the hostname for the hosting server (s059.cyon.net):",
            default="",
            validate=validate_hostname,
        ),
        Prompt(
            "hosting_username",
            "Enter the SSH username for the hosting server (required):",
            default="",
            validate=validate_alphanumeric_dash,
        ),
        Prompt(
            "hosting_path",
            "Enter the path on the hosting server (/home/required/www/):",
            default="",
            validate=validate_directory,
        ),
        Prompt(
            "table_prefix",
            "Enter the WordPress database table prefix (project_):",
            default=lambda a: a["project_slug"].replace("-", "_") + "_",
            validate=validate_alphanumeric_underscore,
        ),
    ]


def collect_aliases(ctx: Context, is_multisite: bool) -> dict[str, list[str]]:
    """Host aliases per environment; staging and development default to the production ones."""
    production = ctx.prompts.collect_many(
        Prompt(
            "production_aliases",
            "Enter the production hostname alias (example.ch):",
            validate=validate_hostname,
            when=is_multisite,
        )
    )

    def nth(i: int) -> str | None:
        return production[i] if i < len(production) else None

    staging = ctx.prompts.collect_many(
        Prompt(
            "staging_aliases",
            "Enter the staging hostname alias (staging.example.ch):",
            validate=validate_hostname,
            when=is_multisite,
        ),
        default_for=lambda i: "staging." + nth(i) if nth(i) else None,
    )
    development = ctx.prompts.collect_many(
        Prompt(
            "development_aliases",
            "Enter the development hostname alias (example-ch.required.test):",
            validate=validate_hostname,
            filter=development_host,
            when=is_multisite,
        ),
        default_for=lambda i: nth(i).split(".")[0] + DEVELOPMENT_SUFFIX if nth(i) else None,
    )
    return {"production": production, "staging": staging, "development": development}


def append_multisite_settings(state: Provisioned, development_host: str) -> None:
    env_file = state.directory / ".local-server" / ".env"
    with env_file.open("a", encoding="utf-8", newline="") as f:
        f.write("\n" + render("multisite.env.j2", development_host=development_host))


def project(ctx: Context, args: argparse.Namespace) -> PipelineResult:
    stored_token = ctx.credentials.get()
    show_intro(ctx, "WordPress project", skip=args.skip_intro, stored_token=stored_token)

    answers = ctx.prompts.collect(project_prompts(stored_token))
    token = answers.pop("github_token")
    ctx.credentials.update(stored_token, token)

    settings = ctx.config.settings
    owner = settings.github_organization
    client = ctx.github(token)
    ensure_repository_absent(client, owner, answers["github_slug"])

    state = Provisioned(directory=ctx.cwd / answers["project_slug"])
    ensure_directory_absent(state.directory)

    answers = ctx.prompts.collect(host_prompts(), initial=answers)
    aliases = collect_aliases(ctx, bool(answers["is_multisite"]))
    answers = ctx.prompts.collect(hosting_prompts(), initial=answers)
    ctx.console.print()

    rule_sets: list[RuleSet] = []
    if answers["is_multisite"]:
        rule_sets.append(
            multisite_rules(
                project_host=answers["project_host"],
                staging_host=answers["staging_host"],
                development_host=answers["development_host"],
                production_aliases=",".join(aliases["production"]),
                staging_aliases=",".join(aliases["staging"]),
                development_aliases=",".join(aliases["development"]),
            )
        )
    rule_sets += [
        project_secret_rules(table_prefix=answers["table_prefix"]),
        project_rules(
            name=answers["project_name"],
            description=answers["project_description"],
            slug=answers["project_slug"],
            project_host=answers["project_host"],
            staging_host=answers["staging_host"],
            development_host=answers["development_host"],
            hosting_hostname=answers["hosting_hostname"],
            hosting_username=answers["hosting_username"],
            hosting_path=answers["hosting_path"],
        ),
    ]

    def rename() -> None:
        if answers["is_multisite"]:
            append_multisite_settings(state, answers["development_host"])
        for rule_set in rule_sets:
            replace_in_files(state.directory, rule_set.globs, rule_set.rules)

    steps = provisioning_steps(
        ctx,
        client,
        state,
        template=settings.project_template_repo,
        owner=owner,
        name=answers["github_slug"],
        private=True,
        description=answers["project_description"],
    )
    steps += [
        Step("Renaming project files", "Could not rename files.", rename),
        commit_step(state, "Update project name"),
    ]

    result = run_pipeline(ctx.runner, steps)
    if result.ok:
        print_done(ctx, state)
    return result