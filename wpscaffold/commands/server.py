"""
server.py

Responsibility: `setup-remote-server create`.

Run inside a project checkout. Prepares the shared files of a Deployer-managed
staging or production site on the hosting server:

- `.env` derived from `.local-server/.env` with remote database credentials
- `.htaccess` (staging: basic auth, robots header and a media fallback to production)
- `.htpasswd` (staging only)

The files are staged in `.local-server/` under environment-specific names,
uploaded over SSH, and removed again whether or not the upload worked.
"""

from __future__ import annotations

import argparse
import logging
import shlex
import shutil
from pathlib import Path

from wpscaffold import console as fmt
from wpscaffold.commands.common import Context, show_intro
from wpscaffold.deploy import (
    ENVIRONMENT_CHOICES,
    DeployDescriptor,
    htpasswd_line,
    parse_deploy_file,
    read_env_file,
    remote_http_host,
    resolve_addresses,
)
from wpscaffold.prompts import Prompt, confirm_until_yes
from wpscaffold.replacer import replace_in_files
from wpscaffold.rulesets import remote_env_rules
from wpscaffold.shell import scoped_env
from wpscaffold.ssh import SSHConnection
from wpscaffold.steps import Aborted, PipelineResult, Step, run_pipeline
from wpscaffold.templating import render_htaccess
from wpscaffold.validation import validate_hostname, validate_not_empty, validate_slug, validate_unix_path

logger = logging.getLogger(__name__)

LOCAL_SERVER_DIR = ".local-server"
DEPLOY_FILE = "deploy.yml"
DEFAULT_PRIVATE_KEY = "~/.ssh/id_rsa"


def _expand_user(value: str) -> str:
    return str(Path(str(value or "")).expanduser()) if value else ""


def connection_prompts(descriptor: DeployDescriptor) -> list[Prompt]:
    return [
        Prompt(
            "host_name",
            "Enter the hostname for the remote server:",
            default=descriptor.base.hostname,
            validate=validate_hostname,
        ),
        Prompt(
            "host_user",
            "Enter the SSH username for the remote server:",
            default=descriptor.base.user,
            validate=validate_slug,
        ),
        Prompt(
            "private_key",
            "Enter the local path to your private SSH key:",
            default=DEFAULT_PRIVATE_KEY,
            filter=_expand_user,
            validate=validate_unix_path,
        ),
    ]


def database_prompts() -> list[Prompt]:
    return [
        Prompt("db_host", "Enter the database host:", default="localhost", validate=validate_not_empty),
        Prompt("db_name", "Enter the database name:", validate=validate_not_empty),
        Prompt("db_user", "Enter the database username:", validate=validate_not_empty),
        Prompt("db_password", "Enter the database password:", kind="password", validate=validate_not_empty),
    ]


def basic_auth_prompts() -> list[Prompt]:
    return [
        Prompt("basic_auth_user", "Enter the BasicAuth username:", validate=validate_not_empty),
        Prompt("basic_auth_password", "Enter the BasicAuth password:", kind="password", validate=validate_not_empty),
    ]


def write_remote_env(local_dir: Path, environment: str, answers: dict) -> Path:
    """Copy the local `.env` to `.env.<environment>` and rewrite it for the remote server."""
    source = local_dir / ".env"
    target = local_dir / f".env.{environment}"
    shutil.copyfile(source, target)

    env = read_env_file(source)
    rules = remote_env_rules(
        target.name,
        environment=environment,
        local_http_host=env.get("_HTTP_HOST", ""),
        remote_http_host=remote_http_host(env, environment),
        db_host=answers["db_host"],
        db_name=answers["db_name"],
        db_user=answers["db_user"],
        db_password=answers["db_password"],
    )
    replace_in_files(local_dir, rules.globs, rules.rules, allow_empty=False)
    return target


def write_htpasswd(path: Path, user: str, password: str) -> None:
    path.write_text(htpasswd_line(user, password) + "\n", encoding="utf-8")


def upload_steps(
    ssh: SSHConnection,
    remote_path: str,
    env_file: Path,
    htaccess_file: Path,
    htpasswd_file: Path | None,
) -> list[Step]:
    shared = f"{remote_path.rstrip('/')}/shared"
    steps = [
        Step(
            "Creating directories on remote server",
            "Could not create directories on remote server.",
            lambda: ssh.execute(f"mkdir -p {shlex.quote(shared + '/wordpress/content/uploads')}"),
        ),
        Step(
            "Copying .env to remote server",
            "Could not copy .env to remote server.",
            lambda: ssh.put(env_file, f"{shared}/wordpress/.env"),
        ),
        Step(
            "Copying .htaccess to remote server",
            "Could not copy .htaccess to remote server.",
            lambda: ssh.put(htaccess_file, f"{shared}/wordpress/.htaccess"),
        ),
    ]
    if htpasswd_file is not None:
        steps.append(
            Step(
                "Copying .htpasswd to remote server",
                "Could not copy .htpasswd to remote server.",
                lambda: ssh.put(htpasswd_file, f"{shared}/.htpasswd"),
            )
        )
    return steps


def _remove(paths: list[Path]) -> None:
    for path in paths:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("could not remove %s: %s", path, e)


def server(ctx: Context, args: argparse.Namespace) -> PipelineResult:
    show_intro(
        ctx,
        "remote server",
        skip=args.skip_intro,
        ask_token=False,
        ready_message="Has the server and project repo been setup for Deployer?",
    )

    local_dir = ctx.cwd / LOCAL_SERVER_DIR
    if not local_dir.is_dir():
        raise Aborted(
            "This directory does not seem to be a project. Please run the command within a project directory.",
            exit_code=1,
        )
    descriptor = parse_deploy_file(ctx.cwd / DEPLOY_FILE)

    stage_key = ctx.prompts.ask_one(
        Prompt("remote_environment", "Choose the remote environment", kind="select", choices=ENVIRONMENT_CHOICES),
        {},
    )
    environment = descriptor.environment(stage_key)
    protect = environment != "production"

    answers = ctx.prompts.collect(connection_prompts(descriptor))
    ssh = ctx.ssh(answers["host_name"], answers["host_user"], Path(answers["private_key"]))
    ctx.runner.run("Connecting to remote server", "Could not connect to remote server.", ssh.check)

    ctx.console.print(fmt.warning("Point the domain to directory on hosting provider."))
    confirm_until_yes(ctx.asker, "Have you set up the domain?")

    remote_path = ctx.prompts.ask_one(
        Prompt(
            "remote_path",
            "Enter the path for the site directory:",
            default=descriptor.default_remote_path(answers["host_user"], environment),
            validate=validate_unix_path,
        ),
        answers,
    )

    ctx.console.print(fmt.warning("Create a new database on the hosting provider."))
    confirm_until_yes(ctx.asker, "Have you created the database?")
    answers = ctx.prompts.collect(database_prompts(), initial=answers)

    staged: list[Path] = [local_dir / f".env.{environment}"]
    try:
        env_file = ctx.runner.run(
            "Writing remote .env",
            "Could not write remote .env.",
            lambda: write_remote_env(local_dir, environment, answers),
        )

        env = read_env_file(local_dir / ".env")
        htpasswd_file: Path | None = None
        ipv4: list[str] = []
        ipv6: list[str] = []
        if protect:
            auth = ctx.prompts.collect(basic_auth_prompts())
            htpasswd_file = local_dir / ".htpasswd"
            staged.append(htpasswd_file)
            ctx.runner.run(
                "Writing .htpasswd",
                "Could not write .htpasswd.",
                lambda: write_htpasswd(local_dir / ".htpasswd", auth["basic_auth_user"], auth["basic_auth_password"]),
            )
            ctx.console.print(fmt.success(f".htpasswd saved to /{LOCAL_SERVER_DIR}"))
            ipv4, ipv6 = resolve_addresses(answers["host_name"])

        htaccess_file = local_dir / f".htaccess.{environment}"
        staged.append(htaccess_file)
        ctx.runner.run(
            "Writing .htaccess",
            "Could not write .htaccess.",
            lambda: htaccess_file.write_text(
                render_htaccess(
                    protect=protect,
                    application=descriptor.base.application,
                    environment=environment,
                    remote_path=remote_path,
                    ipv4=ipv4,
                    ipv6=ipv6,
                    media_url=env.get("URL_PRODUCTION", ""),
                ),
                encoding="utf-8",
            ),
        )
        ctx.console.print(fmt.success(f".htaccess.{environment} saved to /{LOCAL_SERVER_DIR}"))

        result = run_pipeline(ctx.runner, upload_steps(ssh, remote_path, env_file, htaccess_file, htpasswd_file))
    finally:
        _remove(staged)

    if not result.ok:
        return result

    ctx.console.print(fmt.success("\n✅  Done!"))
    ctx.console.print(f"{descriptor.base.application} {environment} is now installed under {remote_path}")
    ctx.console.print(f"Push a commit to GitHub or manually trigger a deployment: {descriptor.workflow_url}")

    if descriptor.repository_slug and ctx.asker.confirm("Trigger a deployment now?", default=False):
        deploy = run_pipeline(
            ctx.runner,
            [
                Step(
                    "Triggering deployment",
                    "Could not trigger the deployment workflow.",
                    lambda: ctx.shell(
                        ["gh", "workflow", "run", "deploy.yml", "--repo", descriptor.repository_slug],
                        env=scoped_env(),
                    ),
                )
            ],
        )
        result.completed += deploy.completed
        result.failure = deploy.failure
    return result
