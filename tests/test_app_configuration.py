from pathlib import Path

import pytest

from logcord.configuration.app_configuration import (
    DEFAULT_ATTRIBUTION_WINDOW_MS,
    AppConfig,
)
from logcord.configuration.reaction_roles import ReactionRoleRule
from logcord.datatypes.discord_datatypes import RoleID


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "app_config.yml"


def test_app_config_reload_parses_yaml(config_path: Path, tmp_path: Path) -> None:
    config_path.write_text(
        f"""
database_path: {tmp_path / "store.db"}
attribution_window_ms: 2500
reaction_roles:
  rules:
    "1350175816314650654": 1349830365761769532
    "1350175793472602112": 1349830331930640455
  agreement:
    emoji: "✅"
    role_id: 1348705958213456004
    rules_title: "SERVER RULES"
""",
        encoding="utf-8",
    )

    config = AppConfig(config_path)

    assert config.database_path == (tmp_path / "store.db").resolve()
    assert config.attribution_window_ms == 2500

    registry = config.reaction_role_registry
    assert len(registry) == 3
    assert registry.role_for_emoji(1350175816314650654) == RoleID(1349830365761769532)
    assert registry.agreement.rules_title == "SERVER RULES"


def test_app_config_missing_file_returns_defaults(tmp_path: Path) -> None:
    config = AppConfig(tmp_path / "does_not_exist.yml")

    assert config.data == {}
    assert config.attribution_window_ms == DEFAULT_ATTRIBUTION_WINDOW_MS
    assert config.database_path.name == "logcord.db"
    assert len(config.reaction_role_registry) == 0


def test_app_config_malformed_yaml_returns_defaults(config_path: Path) -> None:
    config_path.write_text("reaction_roles: [unclosed", encoding="utf-8")

    config = AppConfig(config_path)

    assert config.data == {}


def test_app_config_non_mapping_is_ignored(config_path: Path) -> None:
    config_path.write_text("- just\n- a list\n", encoding="utf-8")

    assert AppConfig(config_path).data == {}


@pytest.mark.parametrize("raw, expected", [("abc", DEFAULT_ATTRIBUTION_WINDOW_MS), (-20, 0), ("750", 750)])
def test_attribution_window_validation(config_path: Path, raw, expected) -> None:
    config_path.write_text(f"attribution_window_ms: {raw!r}\n", encoding="utf-8")

    assert AppConfig(config_path).attribution_window_ms == expected


def test_reload_picks_up_changes(config_path: Path) -> None:
    config_path.write_text("attribution_window_ms: 1000\n", encoding="utf-8")
    config = AppConfig(config_path)
    config_path.write_text("attribution_window_ms: 3000\n", encoding="utf-8")

    config.reload()

    assert config.get("attribution_window_ms") == 3000


def test_registry_skips_malformed_rules(config_path: Path) -> None:
    config_path.write_text(
        """
reaction_roles:
  rules:
    "123": 456
    "not-a-number": 789
    "124": "nope"
""",
        encoding="utf-8",
    )

    registry = AppConfig(config_path).reaction_role_registry

    assert registry.rules == (ReactionRoleRule(123, RoleID(456)),)
    assert registry.agreement is None
