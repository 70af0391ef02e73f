"""
rulesets.py

Responsibility: The placeholder tables of the plugin, theme and project templates.

Each builder returns a `RuleSet`: the file globs a template keeps its
placeholders in, and the ordered rules that rewrite them. Order matters. The
namespace rules run before the generic `ThemeName`/`plugin-name` rules so that
`Required\\ThemeName` is replaced as a whole.
"""

from __future__ import annotations

import re
import secrets
from dataclasses import dataclass
from typing import Callable, Sequence

from wpscaffold.replacer import ReplacementRule, keep_suffix, rule, token
from wpscaffold.textcase import camel_case, pascal_case, snake_case

# wp_generate_password() alphabet, special characters included.
SALT_CHARACTERS = "!@#$%^&*()-_ []{}<>~`+=,.;:/?|abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
SALT_KEYS = (
    "AUTH_KEY",
    "SECURE_AUTH_KEY",
    "LOGGED_IN_KEY",
    "NONCE_KEY",
    "AUTH_SALT",
    "SECURE_AUTH_SALT",
    "LOGGED_IN_SALT",
    "NONCE_SALT",
)


@dataclass(frozen=True)
class RuleSet:
    globs: Sequence[str]
    rules: Sequence[ReplacementRule]


def random_salt(length: int = 64) -> str:
    return "".join(secrets.choice(SALT_CHARACTERS) for _ in range(length))


def _escaped_namespace(namespace: str) -> str:
    # JSON files carry the namespace with doubled backslashes.
    return namespace.replace("\\", "\\\\")


def plugin_rules(*, name: str, slug: str, namespace: str, description: str, github_slug: str) -> RuleSet:
    return RuleSet(
        globs=(
            "README.md",
            "composer.json",
            "package.json",
            "phpcs.xml.dist",
            "webpack.config.js",
            "plugin.php",
            "inc/**/*.php",
            "assets/src/**/*.ts",
            "assets/src/**/*.tsx",
            "assets/src/**/*.js",
            "assets/src/**/*.json",
            "assets/src/**/*.css",
        ),
        rules=(
            keep_suffix("Plugin Name", name),
            token("Required\\PluginName", namespace),
            token("Required\\\\PluginName", _escaped_namespace(namespace)),
            token("plugin-name", slug),
            token("plugin_name", snake_case(slug)),
            token("pluginName", camel_case(slug)),
            token("Plugin description.", description),
            token("wordpress-plugin-boilerplate", github_slug),
        ),
    )


def example_block_rules() -> tuple[RuleSet, RuleSet]:
    """Unregister the example block and drop its webpack entry."""
    return (
        RuleSet(
            globs=("inc/Blocks/namespace.php",),
            rules=(rule(r"\tregister_block_type\(.*\);\n", "", flags=re.DOTALL),),
        ),
        RuleSet(
            globs=("webpack.config.js",),
            rules=(rule(r"\n\t\t'example-block-view': '\./blocks/example/view\.js',", ""),),
        ),
    )


def boilerplate_plugin_rules(*, name: str, slug: str, github_slug: str, main_file: str | None = None) -> RuleSet:
    return RuleSet(
        globs=(
            "composer.json",
            "package.json",
            "phpcs.xml.dist",
            ".eslintrc.js",
            main_file or f"{slug}.php",
            "inc/**/*.php",
            "assets/js/src/**/*.js",
        ),
        rules=(
            keep_suffix("Plugin Name", name),
            token("Plugin name", name),
            token("PluginName", pascal_case(slug)),
            token("plugin-name", slug),
            token("plugin_name", snake_case(slug)),
            token("wordpress-plugin-boilerplate", github_slug),
        ),
    )


def _theme_rules(*, name: str, slug: str, namespace: str, description: str, github_slug: str) -> tuple[ReplacementRule, ...]:
    return (
        keep_suffix("Theme Name", name),
        token("Required\\ThemeName", namespace),
        token("Required\\\\ThemeName", _escaped_namespace(namespace)),
        token("theme-name", slug),
        token("theme_name", snake_case(slug)),
        token("ThemeName", camel_case(slug)),
        token("Theme description.", description),
        token("wordpress-theme-boilerplate", github_slug),
    )


def theme_rules(*, name: str, slug: str, namespace: str, description: str, github_slug: str) -> RuleSet:
    return RuleSet(
        globs=(
            "README.md",
            "composer.json",
            "package.json",
            "phpcs.xml.dist",
            "webpack.config.js",
            "style.css",
            "**/*.php",
        ),
        rules=_theme_rules(name=name, slug=slug, namespace=namespace, description=description, github_slug=github_slug),
    )


def boilerplate_theme_rules(*, name: str, slug: str, namespace: str, description: str, github_slug: str) -> RuleSet:
    return RuleSet(
        globs=(
            "README.md",
            "composer.json",
            "package.json",
            "phpcs.xml.dist",
            "style.css",
            "*.php",
            "inc/*.php",
            "template-parts/*.php",
        ),
        rules=_theme_rules(name=name, slug=slug, namespace=namespace, description=description, github_slug=github_slug),
    )


def multisite_rules(
    *,
    project_host: str,
    staging_host: str,
    development_host: str,
    production_aliases: str,
    staging_aliases: str,
    development_aliases: str,
) -> RuleSet:
    return RuleSet(
        globs=(".env.lokal",),
        rules=(
            token("#PROJECT_SERVER_ALIAS=", f"PROJECT_SERVER_ALIAS={development_aliases}", count=1),
            token("#PROJECT_IS_MULTISITE=true", "PROJECT_IS_MULTISITE=true", count=1),
            token("#MIGRATE_PRODUCTION_FIND=", f"MIGRATE_PRODUCTION_FIND={project_host},{production_aliases}", count=1),
            token(
                "#MIGRATE_PRODUCTION_REPLACE=",
                f"MIGRATE_PRODUCTION_REPLACE={development_host},{development_aliases}",
                count=1,
            ),
            token("#MIGRATE_STAGING_FIND=", f"MIGRATE_STAGING_FIND={staging_host},{staging_aliases}", count=1),
            token(
                "#MIGRATE_STAGING_REPLACE=",
                f"MIGRATE_STAGING_REPLACE={development_host},{development_aliases}",
                count=1,
            ),
        ),
    )


def project_secret_rules(*, table_prefix: str, salt: Callable[[], str] = random_salt) -> RuleSet:
    """Table prefix plus one fresh random value per WordPress key and salt."""
    return RuleSet(
        globs=(".local-server/.env",),
        rules=(token("wp_table_prefix_", table_prefix),) + tuple(token(f"[[{key}]]", salt()) for key in SALT_KEYS),
    )


def project_rules(
    *,
    name: str,
    description: str,
    slug: str,
    project_host: str,
    staging_host: str,
    development_host: str,
    hosting_hostname: str,
    hosting_username: str,
    hosting_path: str,
) -> RuleSet:
    tld = project_host.split(".")[-1]
    return RuleSet(
        globs=(
            ".env.lokal",
            "README.md",
            "composer.json",
            "phpcs.xml.dist",
            "deploy.yml",
            "wp-cli.yml",
            ".local-server/.env",
            ".local-server/.htaccess",
        ),
        rules=(
            token("Project Name", name),
            token("Project description.", description),
            token("project-name.required.test", development_host),
            token("staging.project-name.ch", staging_host),
            token("project-name.ch", project_host),
            token("${COMPOSE_PROJECT_NAME}.ch", f"${{COMPOSE_PROJECT_NAME}}.{tld}"),
            token("hosting-username", hosting_username),
            token("hostname.ch", hosting_hostname),
            token("/home/required/www/", hosting_path),
            token("project-name", slug),
        ),
    )


def remote_env_rules(
    env_file: str,
    *,
    environment: str,
    local_http_host: str,
    remote_http_host: str,
    db_host: str,
    db_name: str,
    db_user: str,
    db_password: str,
) -> RuleSet:
    """Turn a copy of the local development .env into a remote one."""
    rules = [
        token("WP_ENV=development", f"WP_ENV={environment}"),
        token(f'_HTTP_HOST="{local_http_host}"', f'_HTTP_HOST="{remote_http_host}"'),
        token("DB_HOST=${MYSQL_HOST}", f"DB_HOST={db_host}"),
        token("DB_NAME=${MYSQL_DATABASE}", f"DB_NAME={db_name}"),
        token("DB_USER=${MYSQL_USER}", f"DB_USER={db_user}"),
        token("DB_PASSWORD=${MYSQL_PASSWORD}", f"DB_PASSWORD={db_password}"),
        token("WP_DEBUG_DISPLAY=true", "WP_DEBUG_DISPLAY=false"),
        token("SCRIPT_DEBUG=true", "SCRIPT_DEBUG=false"),
    ]
    if environment == "staging":
        rules.append(token("JETPACK_DEV_DEBUG=true", "JETPACK_STAGING_MODE=true"))
    elif environment == "production":
        rules += [
            token("WP_DEBUG=true", "WP_DEBUG=false"),
            token("WP_DEBUG_LOG=true", "WP_DEBUG_LOG=false"),
            token("SAVEQUERIES=true", "SAVEQUERIES=false"),
            token("QM_DISABLED=false", "QM_DISABLED=true"),
            token("JETPACK_DEV_DEBUG=true", ""),
        ]
    return RuleSet(globs=(env_file,), rules=tuple(rules))
