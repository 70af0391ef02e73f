"""
templating.py

Responsibility: Render the text templates shipped inside the package.

Templates live in `wpscaffold/templates/` and are rendered with Jinja2 using
StrictUndefined, so a missing context value fails loudly instead of leaving a
blank in a server config file.

This module intentionally does NOT know where rendered output is written.
"""

from __future__ import annotations

from typing import Any

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError


class RenderError(RuntimeError):
    pass


_env = Environment(
    loader=PackageLoader("wpscaffold", "templates"),
    autoescape=False,
    undefined=StrictUndefined,
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
)


def render(name: str, **context: Any) -> str:
    try:
        return _env.get_template(name).render(**context)
    except TemplateError as e:
        raise RenderError(f"Failed rendering template: {name}") from e


def render_htaccess(
    *,
    protect: bool,
    application: str = "",
    environment: str = "",
    remote_path: str = "",
    ipv4: list[str] | None = None,
    ipv6: list[str] | None = None,
    media_url: str = "",
) -> str:
    """
    .htaccess for a remote environment.

    With `protect`, the site is hidden from robots and behind basic auth
    (the hosting server's own addresses and localhost are let through), and
    missing uploads are loaded from `media_url`.
    """
    return render(
        "htaccess.j2",
        protect=protect,
        application=application,
        environment=environment,
        remote_path=remote_path,
        ipv4=ipv4 or [],
        ipv6=ipv6 or [],
        media_url=media_url if protect else "",
    )
