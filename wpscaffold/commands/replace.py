"""
replace.py

Responsibility: `wp-boilerplate replace plugin|theme`.

Run inside a fresh checkout of a boilerplate to rewrite its placeholders in
place. With `--dry-run` the changed files are listed but nothing is written.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from wpscaffold import console as fmt
from wpscaffold.commands.common import Context
from wpscaffold.prompts import Prompt
from wpscaffold.replacer import FileChange, replace_in_files
from wpscaffold.rulesets import RuleSet, boilerplate_plugin_rules, boilerplate_theme_rules
from wpscaffold.steps import Aborted, PipelineResult, Step, run_pipeline
from wpscaffold.textcase import kebab_case, pascal_case
from wpscaffold.validation import validate_not_empty, validate_php_namespace, validate_slug

PLUGIN_MAIN_FILE = "plugin-name.php"
THEME_MAIN_FILE = "style.css"


def _require_file(ctx: Context, name: str) -> Path:
    path = ctx.cwd / name
    if not path.exists():
        raise Aborted(f"{path} not found", exit_code=1)
    return path


def _confirm_rewrite(ctx: Context, name: str, slug: str) -> None:
    ctx.console.print()
    if not ctx.asker.confirm(f"Start rewriting the files for {name} with slug {slug}?", default=True):
        raise Aborted("Aborting.")
    ctx.console.print()


def _report_changes(ctx: Context, changes: Sequence[FileChange]) -> None:
    for change in changes:
        if change.changed:
            ctx.console.print(f"ℹ️  Updated {change.file.relative_to(ctx.cwd)}")


def replace_plugin(ctx: Context, args: argparse.Namespace) -> PipelineResult:
    dry = bool(args.dry_run)
    if dry:
        ctx.console.print(fmt.warning("Dry run enabled."))
    main_file = _require_file(ctx, PLUGIN_MAIN_FILE)

    answers = ctx.prompts.collect(
        [
            Prompt("plugin_name", "Enter the name of the plugin:", default="My Plugin", validate=validate_not_empty),
            Prompt(
                "plugin_slug",
                "Enter the slug of the plugin:",
                default=lambda a: kebab_case(a["plugin_name"]),
                validate=validate_slug,
            ),
            Prompt(
                "github_slug",
                "Enter the slug of the GitHub repo:",
                default=lambda a: a["plugin_slug"],
                validate=validate_slug,
            ),
        ]
    )
    name, slug = answers["plugin_name"], answers["plugin_slug"]
    _confirm_rewrite(ctx, name, slug)

    # Nothing is renamed in a dry run, so the placeholders are still in the old file.
    rules = boilerplate_plugin_rules(
        name=name,
        slug=slug,
        github_slug=answers["github_slug"],
        main_file=PLUGIN_MAIN_FILE if dry else None,
    )
    changes: list[FileChange] = []

    def rename() -> None:
        changes.extend(replace_in_files(ctx.cwd, rules.globs, rules.rules, dry=dry))

    steps: list[Step] = []
    if dry:
        ctx.console.print(f"ℹ️  Would rename {PLUGIN_MAIN_FILE} to {slug}.php and rewrite README.md")
    else:
        steps += [
            Step(
                "Renaming main plugin file",
                "Could not rename main plugin file.",
                lambda: main_file.rename(ctx.cwd / f"{slug}.php"),
            ),
            Step(
                "Updating README.md",
                "Could not update README.md.",
                lambda: (ctx.cwd / "README.md").write_text(f"# {name}\n", encoding="utf-8"),
            ),
        ]
    steps.append(Step("Renaming plugin files", "Could not rename files.", rename))

    result = run_pipeline(ctx.runner, steps)
    if result.ok:
        _report_changes(ctx, changes)
        ctx.console.print(fmt.success("\n✅  Done"))
    return result


def replace_theme(ctx: Context, args: argparse.Namespace) -> PipelineResult:
    dry = bool(args.dry_run)
    if dry:
        ctx.console.print(fmt.warning("Dry run enabled."))
    _require_file(ctx, THEME_MAIN_FILE)

    answers = ctx.prompts.collect(
        [
            Prompt("theme_name", "Enter the name of the theme:", default="My Theme", validate=validate_not_empty),
            Prompt("theme_description", "Enter the description of the theme:", default=""),
            Prompt(
                "theme_slug",
                "Enter the slug of the theme:",
                default=lambda a: kebab_case(a["theme_name"]),
                validate=validate_slug,
            ),
            Prompt(
                "php_namespace",
                "Enter the PHP namespace of the theme:",
                default=lambda a: "Required\\" + pascal_case(a["theme_slug"]),
                validate=validate_php_namespace,
            ),
            Prompt(
                "github_slug",
                "Enter the slug of the GitHub repo:",
                default=lambda a: a["theme_slug"],
                validate=validate_slug,
            ),
        ]
    )
    _confirm_rewrite(ctx, answers["theme_name"], answers["theme_slug"])

    rules: RuleSet = boilerplate_theme_rules(
        name=answers["theme_name"],
        slug=answers["theme_slug"],
        namespace=answers["php_namespace"],
        description=answers["theme_description"],
        github_slug=answers["github_slug"],
    )
    changes: list[FileChange] = []

    def rename() -> None:
        changes.extend(replace_in_files(ctx.cwd, rules.globs, rules.rules, dry=dry))

    result = run_pipeline(ctx.runner, [Step("Renaming theme files", "Could not rename files.", rename)])
    if result.ok:
        _report_changes(ctx, changes)
        ctx.console.print(fmt.success("\n✅  Done!"))
    return result
