"""
common.py

Responsibility: Services and steps shared by the subcommands.

`Context` carries every collaborator a command talks to (console, prompts,
config, keychain, GitHub, git, shell, SSH). The CLI builds the real one;
tests build one out of fakes.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Sequence

from rich.console import Console

from wpscaffold import console as fmt
from wpscaffold import shell
from wpscaffold.config import ConfigStore, CredentialStore
from wpscaffold.github_client import GitHubClient, GitHubError, PullRequestRef, RepoInfo
from wpscaffold.prompts import Asker, Prompt, PromptCollector, confirm_ready
from wpscaffold.replacer import replace_in_files
from wpscaffold.rulesets import RuleSet
from wpscaffold.shell import GitCheckout
from wpscaffold.ssh import SSHConnection
from wpscaffold.steps import Aborted, Step, StepRunner
from wpscaffold.validation import validate_not_empty

TOKEN_URL = "https://github.com/settings/tokens"


@dataclass
class Context:
    console: Console
    asker: Asker
    config: ConfigStore
    credentials: CredentialStore
    runner: StepRunner
    cwd: Path = field(default_factory=Path.cwd)
    github: Callable[[str], GitHubClient] = GitHubClient
    clone: Callable[[RepoInfo, Path], GitCheckout] = GitCheckout.clone
    clone_url: Callable[[str, Path], GitCheckout] = GitCheckout.clone_url
    shell: Callable[..., str] = shell.run
    ssh: Callable[[str, str, Path], SSHConnection] = SSHConnection
    sleep: Callable[[float], None] = time.sleep

    @property
    def prompts(self) -> PromptCollector:
        return PromptCollector(self.asker)


def show_intro(
    ctx: Context,
    subject: str,
    *,
    skip: bool,
    stored_token: str | None = None,
    ask_token: bool = True,
    ready_message: str = "Are you ready to proceed?",
) -> None:
    if skip or ctx.config.settings.skip_intros:
        return
    ctx.console.print(fmt.title("👋  Welcome to wpscaffold"))
    ctx.console.print(f"\nThis tool will guide you through the setup process of a new {fmt.comment(subject)}.\n")
    if ask_token and not stored_token:
        ctx.console.print(
            "Before you can start please make sure you have created a "
            f"[link={TOKEN_URL}]personal access token for GitHub[/link] with the 'repo' scope selected.\n"
            "After the first run the token gets stored in your system's keychain "
            "and will be pre-filled on next runs.\n"
        )
    confirm_ready(ctx.asker, ready_message)
    ctx.console.print()


def token_prompt(stored: str | None) -> Prompt:
    return Prompt("github_token", "GitHub API token:", kind="password", default=stored, validate=validate_not_empty)


def defaults_with_last_input(ctx: Context, tool: str, defaults: dict[str, Any]) -> dict[str, Any]:
    last_input = ctx.config.last_input(tool)
    if not last_input:
        return dict(defaults)
    use_last = ctx.asker.confirm("Use last input as default?", default=True)
    ctx.console.print()
    return {**defaults, **last_input} if use_last else dict(defaults)


def ensure_repository_absent(client: GitHubClient, owner: str, name: str) -> None:
    try:
        exists = client.has_repository(owner, name)
    except GitHubError as e:
        raise Aborted(f"{e}\n\nCould not verify that the repository does not already exist.", exit_code=1) from e
    if exists:
        raise Aborted(f"Repository {owner}/{name} already exists.", exit_code=1)


def ensure_directory_absent(directory: Path) -> None:
    if directory.exists():
        raise Aborted(f"{directory} already exists, please delete first.", exit_code=1)


@dataclass
class Provisioned:
    """What the generator pipeline has created so far."""

    directory: Path
    repo: RepoInfo | None = None
    checkout: GitCheckout | None = None

    def require_repo(self) -> RepoInfo:
        if self.repo is None:
            raise RuntimeError("The repository has not been created yet.")
        return self.repo

    def require_checkout(self) -> GitCheckout:
        if self.checkout is None:
            raise RuntimeError("The repository has not been cloned yet.")
        return self.checkout


def provisioning_steps(
    ctx: Context,
    client: GitHubClient,
    state: Provisioned,
    *,
    template: str,
    owner: str,
    name: str,
    private: bool,
    description: str,
    topics: Sequence[str] = (),
) -> list[Step]:
    """Create from template, wait for readiness, tag, clone."""

    def create() -> None:
        state.repo = client.create_repo_from_template(
            template=template, owner=owner, name=name, private=private, description=description
        )

    def wait() -> None:
        client.mark_ready(state.require_repo(), sleep=ctx.sleep, max_attempts=ctx.config.settings.ready_max_attempts)

    def add_topics() -> None:
        repo = state.require_repo()
        client.replace_topics(repo.owner, repo.name, list(topics))

    def clone() -> None:
        state.checkout = ctx.clone(state.require_repo(), state.directory)

    steps = [
        Step("Creating repository using template", "Could not create repo.", create),
        Step("Waiting until repository is ready", "Could not create repo.", wait),
    ]
    if topics:
        steps.append(Step("Adding topic to repo", "Could not add topic to repo.", add_topics))
    steps.append(Step("Cloning repository into a new directory", "Git checkout failed.", clone))
    return steps


def rename_step(state: Provisioned, name: str, rule_sets: Sequence[RuleSet]) -> Step:
    def rename() -> None:
        for rule_set in rule_sets:
            replace_in_files(state.directory, rule_set.globs, rule_set.rules)

    return Step(name, "Could not rename files.", rename)


def commit_step(state: Provisioned, message: str) -> Step:
    def commit() -> None:
        state.require_checkout().commit_and_push(message)

    return Step("Committing updated files", "Could not push updated files.", commit)


def shell_step(ctx: Context, state: Provisioned, name: str, abort_message: str, cmd: list[str]) -> Step:
    return Step(name, abort_message, lambda: ctx.shell(cmd, cwd=state.directory))


def print_done(ctx: Context, state: Provisioned) -> None:
    ctx.console.print(fmt.success("\n✅  Done!"))
    ctx.console.print(f"Directory: {state.directory}")
    if state.repo is not None:
        ctx.console.print(f"GitHub Repo: {state.repo.html_url}")


def select_targets(ctx: Context, message: str, choices: Sequence[tuple[str, Any]]) -> list[Any]:
    selected = ctx.asker.checkbox(message, choices)
    if not selected:
        raise Aborted("Aborting.")
    return selected


def search_pull_requests(ctx: Context, tool: str) -> tuple[str, list[PullRequestRef]]:
    """Token and query prompts, PR search, selection. Returns the token and the chosen PRs."""
    stored = ctx.credentials.get()
    last_input = ctx.config.last_input(tool) or {}
    owner = ctx.config.settings.github_organization

    answers = ctx.prompts.collect(
        [
            token_prompt(stored),
            Prompt(
                "query",
                "Search query:",
                default=last_input.get("query") or f"user:{owner}",
                validate=validate_not_empty,
            ),
        ]
    )
    token = answers["github_token"]
    ctx.credentials.update(stored, token)
    ctx.config.remember(tool, {"query": answers["query"]})
    ctx.config.save()

    client = ctx.github(token)
    pull_requests = ctx.runner.run(
        "Searching pull requests", "PR search failed.", lambda: client.search_pull_requests(answers["query"])
    )
    if not pull_requests:
        raise Aborted("No pull requests found.")

    selected = select_targets(
        ctx,
        "Select pull requests",
        [(f"{pr.repo}#{pr.number} {pr.title}", pr) for pr in pull_requests],
    )
    return token, selected
