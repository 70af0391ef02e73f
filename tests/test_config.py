from pathlib import Path

import keyring
import pytest
import yaml
from keyring.errors import KeyringError

from wpscaffold.config import SCHEMA_VERSION, ConfigError, ConfigStore, CredentialStore, default_config_path, migrate


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    settings = ConfigStore(tmp_path / "config.yml").load()
    assert settings.github_organization == "wearerequired"
    assert settings.plugin_template_repo == "wearerequired/wordpress-plugin-boilerplate"
    assert settings.ready_max_attempts is None
    assert settings.last_input == {}


def test_round_trip(tmp_path: Path) -> None:
    store = ConfigStore(tmp_path / "nested" / "config.yml")
    store.load()
    store.remember("wordpress-plugin", {"plugin_name": "Acme", "private_repo": False})
    store.save()

    reloaded = ConfigStore(store.path)
    reloaded.load()
    assert reloaded.last_input("wordpress-plugin") == {"plugin_name": "Acme", "private_repo": False}
    assert reloaded.last_input("wordpress-theme") is None
    assert reloaded.settings.schema_version == SCHEMA_VERSION


def test_version_one_file_is_migrated(tmp_path: Path) -> None:
    path = tmp_path / "config.yml"
    path.write_text(
        yaml.safe_dump(
            {
                "githubOrganization": "acme",
                "skipIntros": True,
                "pluginLastInput": {"pluginName": "Old", "privateRepo": False},
                "mergePRLastInput": {"query": "user:acme"},
                "lastInput": {"path": "README.md", "branch": "main"},
            }
        ),
        encoding="utf-8",
    )

    settings = ConfigStore(path).load()

    assert settings.github_organization == "acme"
    assert settings.skip_intros is True
    assert settings.last_input["wordpress-plugin"] == {"plugin_name": "Old", "private_repo": False}
    assert settings.last_input["merge-pr"] == {"query": "user:acme"}
    assert settings.last_input["update-file"] == {"path": "README.md", "branch": "main"}
    assert settings.schema_version == SCHEMA_VERSION


def test_migrate_current_version_is_untouched() -> None:
    raw = {"schema_version": SCHEMA_VERSION, "github_organization": "acme"}
    assert migrate(dict(raw)) == raw


def test_invalid_values_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.yml"
    path.write_text(yaml.safe_dump({"schema_version": 2, "plugin_template_repo": "not a repo"}), encoding="utf-8")
    with pytest.raises(ConfigError):
        ConfigStore(path).load()


def test_non_mapping_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        ConfigStore(path).load()


def test_config_path_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WPSCAFFOLD_CONFIG", str(tmp_path / "custom.yml"))
    assert default_config_path() == tmp_path / "custom.yml"


def test_credentials_only_written_when_changed(monkeypatch: pytest.MonkeyPatch) -> None:
    written: list[tuple[str, str, str]] = []
    monkeypatch.setattr(keyring, "get_password", lambda service, account: "old")
    monkeypatch.setattr(keyring, "set_password", lambda service, account, token: written.append((service, account, token)))

    store = CredentialStore("required-generate")
    store.update(store.get(), "old")
    store.update(store.get(), "new")

    assert written == [("required-generate", "github", "new")]


def test_keychain_errors_are_not_fatal(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail(*args: object) -> None:
        raise KeyringError("no backend")

    monkeypatch.setattr(keyring, "get_password", fail)
    monkeypatch.setattr(keyring, "set_password", fail)

    store = CredentialStore("repo-management")
    assert store.get() is None
    store.set("token")
