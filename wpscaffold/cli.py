"""
cli.py

Responsibility: CLI entrypoints for the four wpscaffold tools.

- `wp-generate`: wordpress-plugin, wordpress-theme, wordpress-project
- `wp-boilerplate`: checkout, replace {plugin,theme}, create {plugin,theme}
- `repo-management`: update-file, merge-pr, close-pr
- `setup-remote-server`: create

Every subcommand returns a `PipelineResult` or raises. `execute` is the only
place where results and errors become a process exit status.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Callable

from rich.markup import escape

from wpscaffold import __version__
from wpscaffold import console as fmt
from wpscaffold.commands.checkout import checkout
from wpscaffold.commands.common import Context
from wpscaffold.commands.merge_pr import close_pr, merge_pr
from wpscaffold.commands.plugin import plugin
from wpscaffold.commands.project import project
from wpscaffold.commands.replace import replace_plugin, replace_theme
from wpscaffold.commands.server import server
from wpscaffold.commands.theme import theme
from wpscaffold.commands.update_file import update_file
from wpscaffold.config import ConfigError, ConfigStore, CredentialStore
from wpscaffold.deploy import DeployConfigError
from wpscaffold.prompts import QuestionaryAsker
from wpscaffold.steps import Aborted, StepFailed, StepRunner, report_failure

logger = logging.getLogger(__name__)

GENERATE_SERVICE = "required-generate"
REPO_MANAGEMENT_SERVICE = "repo-management"


def _add_global_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--verbose", action="store_true", help="Log debug output")
    p.add_argument("--log-file", type=Path, default=None, help="Write logs to this file instead of stderr")
    p.add_argument("--config", type=Path, default=None, help="Config file (default: ~/.config/wpscaffold/config.yml)")


def _add_skip_intro(p: argparse.ArgumentParser) -> None:
    p.add_argument("--skip-intro", action="store_true", help="Skip the intro")


def build_generate_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="wp-generate", description="Generate WordPress plugins, themes and projects")
    _add_global_options(p)
    sub = p.add_subparsers(dest="command", required=True)

    for name, func, help_text in (
        ("wordpress-plugin", plugin, "create a new plugin with GitHub repo and local checkout"),
        ("wordpress-theme", theme, "create a new theme with GitHub repo and local checkout"),
        ("wordpress-project", project, "create a new project with GitHub repo and local checkout"),
    ):
        c = sub.add_parser(name, help=help_text)
        _add_skip_intro(c)
        c.set_defaults(func=func)
    return p


def build_boilerplate_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="wp-boilerplate", description="Work with the WordPress boilerplates")
    _add_global_options(p)
    sub = p.add_subparsers(dest="command", required=True)

    c = sub.add_parser("checkout", help="clone the plugin boilerplate")
    c.set_defaults(func=checkout)

    r = sub.add_parser("replace", help="rename the boilerplate placeholders in the current directory")
    rsub = r.add_subparsers(dest="kind", required=True)
    for kind, func in (("plugin", replace_plugin), ("theme", replace_theme)):
        k = rsub.add_parser(kind, help=f"rename {kind} name and other variables")
        k.add_argument("-n", "--dry-run", action="store_true", help="run without actually making replacements")
        k.set_defaults(func=func)

    cr = sub.add_parser("create", help="create a new repository from a boilerplate")
    csub = cr.add_subparsers(dest="kind", required=True)
    for kind, func in (("plugin", plugin), ("theme", theme)):
        k = csub.add_parser(kind, help=f"create a new {kind} with GitHub repo and local checkout")
        _add_skip_intro(k)
        k.set_defaults(func=func)
    return p


def build_repo_management_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="repo-management", description="Bulk operations across repositories")
    _add_global_options(p)
    sub = p.add_subparsers(dest="command", required=True)

    u = sub.add_parser("update-file", help="update and commit a file in many repositories")
    u.set_defaults(func=update_file)

    m = sub.add_parser("merge-pr", help="merge pull requests")
    m.add_argument("--base-branch", default="master", help="Branch the PRs are based on (default: master)")
    m.set_defaults(func=merge_pr)

    c = sub.add_parser("close-pr", help="close pull requests and delete their branches")
    c.set_defaults(func=close_pr)
    return p


def build_server_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="setup-remote-server", description="Prepare a remote server for a project")
    _add_global_options(p)
    sub = p.add_subparsers(dest="command", required=True)

    c = sub.add_parser("create", help="set up a remote environment for the project in the current directory")
    _add_skip_intro(c)
    c.set_defaults(func=server)
    return p


def execute(ctx: Context, args: argparse.Namespace) -> int:
    """Run the selected subcommand and translate its outcome into an exit status."""
    try:
        result = args.func(ctx, args)
    except Aborted as e:
        message = escape(str(e))
        ctx.console.print("\n" + (fmt.error(message) if e.exit_code else fmt.warning(message)))
        return e.exit_code
    except StepFailed as e:
        report_failure(ctx.console, e)
        return 1
    except (ConfigError, DeployConfigError) as e:
        ctx.console.print(fmt.error(escape(str(e))))
        return 1
    except KeyboardInterrupt:
        ctx.console.print(fmt.error("\nAborted."))
        return 130

    if result.failure is not None:
        report_failure(ctx.console, result.failure)
    return result.exit_code


def run(parser: argparse.ArgumentParser, argv: list[str] | None, *, service: str) -> int:
    args = parser.parse_args(argv)
    fmt.configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    logger.debug("%s %s: %s", parser.prog, __version__, args.command)

    console = fmt.make_console()
    config = ConfigStore(args.config)
    try:
        config.load()
    except ConfigError as e:
        console.print(fmt.error(escape(str(e))))
        return 1

    ctx = Context(
        console=console,
        asker=QuestionaryAsker(),
        config=config,
        credentials=CredentialStore(service),
        runner=StepRunner(console),
    )
    return execute(ctx, args)


def _entrypoint(build: Callable[[], argparse.ArgumentParser], service: str) -> Callable[[list[str] | None], int]:
    def main(argv: list[str] | None = None) -> int:
        return run(build(), argv, service=service)

    return main


main_generate = _entrypoint(build_generate_parser, GENERATE_SERVICE)
main_boilerplate = _entrypoint(build_boilerplate_parser, GENERATE_SERVICE)
main_repo_management = _entrypoint(build_repo_management_parser, REPO_MANAGEMENT_SERVICE)
main_setup_remote_server = _entrypoint(build_server_parser, GENERATE_SERVICE)


if __name__ == "__main__":
    raise SystemExit(main_generate())
