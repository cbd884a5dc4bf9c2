"""Tests for looppush configuration and constants."""

from __future__ import annotations

import logging

from looppush.common.config import LoopPushConfig, configure_logging
from looppush.common.constants import EventType, PushServerEnvironment
from looppush.notifications.validation import DeploymentCredentials


# --- Enum Tests ---


def test_event_type_enum():
    assert EventType.TEMPORARY_OVERRIDE_CANCEL == "Temporary Override Cancel"
    assert EventType.TEMPORARY_OVERRIDE == "Temporary Override"
    assert EventType.REMOTE_CARBS_ENTRY == "Remote Carbs Entry"
    assert EventType.REMOTE_BOLUS_ENTRY == "Remote Bolus Entry"


def test_push_server_environment_enum():
    assert PushServerEnvironment.PRODUCTION == "production"


# --- Settings Tests ---


def test_config_defaults(monkeypatch):
    for name in ("LOOP_APNS_KEY", "LOOP_APNS_KEY_ID", "LOOP_DEVELOPER_TEAM_ID", "LOOP_PUSH_SERVER_ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)
    cfg = LoopPushConfig()
    assert cfg.apns_key == ""
    assert cfg.push_server_environment == "development"
    assert cfg.production is False


def test_config_from_environment(monkeypatch):
    monkeypatch.setenv("LOOP_APNS_KEY", "key-material")
    monkeypatch.setenv("LOOP_APNS_KEY_ID", "ABC123DEFG")
    monkeypatch.setenv("LOOP_DEVELOPER_TEAM_ID", "TEAM123456")
    monkeypatch.setenv("LOOP_PUSH_SERVER_ENVIRONMENT", "production")
    cfg = LoopPushConfig()
    assert cfg.apns_key == "key-material"
    assert cfg.apns_key_id == "ABC123DEFG"
    assert cfg.developer_team_id == "TEAM123456"
    assert cfg.production is True


def test_config_non_production_environment():
    cfg = LoopPushConfig(push_server_environment="Production")
    assert cfg.production is False


def test_credentials_from_config():
    cfg = LoopPushConfig(
        apns_key="k", apns_key_id="kid", developer_team_id="TEAM123456",
        push_server_environment="production",
    )
    creds = DeploymentCredentials.from_config(cfg)
    assert creds == DeploymentCredentials(key="k", key_id="kid", team_id="TEAM123456", production=True)


def test_configure_logging_sets_package_level():
    logger = configure_logging(LoopPushConfig(log_level="DEBUG"))
    assert logger.name == "looppush"
    assert logger.level == logging.DEBUG
