"""
deploy.py

Responsibility: Read a project's deployment descriptor and local environment file.

`deploy.yml` is the Deployer configuration at the project root. Its `.base`
mapping supplies the defaults for the remote server (hostname, user,
application, deploy_path, repository); `stage` and `prod` each name their
environment in a `stage` key.

The CLI should treat the parsed result as the single source of truth for
remote defaults.
"""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values

from wpscaffold import shell

logger = logging.getLogger(__name__)

# (label shown to the operator, key in deploy.yml)
ENVIRONMENT_CHOICES = (("Staging", "stage"), ("Production", "prod"))


class DeployConfigError(ValueError):
    pass


@dataclass(frozen=True)
class DeployBase:
    hostname: str = ""
    user: str = ""
    application: str = ""
    deploy_path: str = ""
    repository: str = ""


@dataclass(frozen=True)
class DeployDescriptor:
    base: DeployBase
    stages: dict[str, dict[str, Any]] = field(default_factory=dict)

    def environment(self, key: str) -> str:
        """Environment name (`staging`, `production`) of a deploy.yml stage key."""
        stage = self.stages.get(key)
        if stage is None:
            raise DeployConfigError(f"The remote environment '{key}' does not exist in deploy.yml.")
        name = str(stage.get("stage") or "").strip()
        if not name:
            raise DeployConfigError(f"`{key}.stage` is missing in deploy.yml.")
        return name

    def default_remote_path(self, user: str, environment: str) -> str:
        return (
            self.base.deploy_path.replace("~/", f"/home/{user}/")
            .replace("{{application}}", self.base.application)
            .replace("{{stage}}", environment)
        )

    @property
    def repository_slug(self) -> str:
        """`owner/name` of the project repository."""
        repo = self.base.repository
        for prefix in ("git@github.com:", "https://github.com/"):
            if repo.startswith(prefix):
                repo = repo[len(prefix) :]
        return repo.removesuffix(".git")

    @property
    def workflow_url(self) -> str:
        return f"https://github.com/{self.repository_slug}/actions/workflows/deploy.yml"


def parse_deploy_file(path: str | Path) -> DeployDescriptor:
    """
    Parse deploy.yml into a `DeployDescriptor`.

    Required: a top-level `.base` mapping. Every other mapping-valued top-level
    key is kept as a stage.
    """
    p = Path(path)
    if not p.exists():
        raise DeployConfigError("This project does not seem to be setup for Deployer.")
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise DeployConfigError("Parsing deploy.yml failed.") from e
    if not isinstance(data, dict):
        raise DeployConfigError("Parsing deploy.yml failed.")

    base_raw = data.get(".base")
    if not isinstance(base_raw, dict):
        raise DeployConfigError("deploy.yml has no `.base` section.")

    base = DeployBase(
        hostname=str(base_raw.get("hostname") or ""),
        user=str(base_raw.get("user") or ""),
        application=str(base_raw.get("application") or ""),
        deploy_path=str(base_raw.get("deploy_path") or ""),
        repository=str(base_raw.get("repository") or ""),
    )
    stages = {str(k): v for k, v in data.items() if k != ".base" and isinstance(v, dict)}
    return DeployDescriptor(base=base, stages=stages)


def read_env_file(path: str | Path) -> dict[str, str]:
    return {k: v or "" for k, v in dotenv_values(path).items()}


def remote_http_host(env: dict[str, str], environment: str) -> str:
    url = env.get("URL_PRODUCTION" if environment == "production" else "URL_STAGING", "")
    return url.replace("https://", "")


def htpasswd_line(user: str, password: str) -> str:
    """`user:hash` with an Apache APR1-MD5 hash computed by openssl."""
    hashed = shell.run(["openssl", "passwd", "-apr1", "-stdin"], input=password + "\n").strip()
    return f"{user}:{hashed}"


def resolve_addresses(hostname: str) -> tuple[list[str], list[str]]:
    """IPv4 and IPv6 addresses of `hostname`; a family that fails to resolve is empty."""
    result: list[list[str]] = []
    for family in (socket.AF_INET, socket.AF_INET6):
        try:
            infos = socket.getaddrinfo(hostname, None, family, socket.SOCK_STREAM)
        except socket.gaierror as e:
            logger.warning("could not resolve %s (%s): %s", hostname, family.name, e)
            infos = []
        result.append(sorted({str(info[4][0]) for info in infos}))
    return result[0], result[1]
