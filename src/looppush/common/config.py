"""Application configuration using Pydantic Settings."""

import logging
from typing import Literal

from pydantic_settings import BaseSettings

from looppush.common.constants import PushServerEnvironment


class LoopPushConfig(BaseSettings):
    """Loop APNs configuration loaded from environment variables.

    Variable names match the Nightscout settings: ``LOOP_APNS_KEY``,
    ``LOOP_APNS_KEY_ID``, ``LOOP_DEVELOPER_TEAM_ID`` and
    ``LOOP_PUSH_SERVER_ENVIRONMENT``.
    """

    apns_key: str = ""
    apns_key_id: str = ""
    developer_team_id: str = ""
    push_server_environment: str = PushServerEnvironment.DEVELOPMENT
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    model_config = {"env_prefix": "LOOP_", "case_sensitive": False}

    @property
    def production(self) -> bool:
        return self.push_server_environment == PushServerEnvironment.PRODUCTION


def configure_logging(config: LoopPushConfig) -> logging.Logger:
    """Apply the configured level to the package logger."""
    logger = logging.getLogger("looppush")
    logger.setLevel(config.log_level)
    return logger


__all__ = ["LoopPushConfig", "configure_logging"]
