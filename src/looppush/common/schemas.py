"""Pydantic v2 schemas for Nightscout profile records."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LoopSettings(BaseModel):
    """Device registration that Loop uploads with its profile."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    device_token: Any = Field(default=None, alias="deviceToken")
    bundle_identifier: Any = Field(default=None, alias="bundleIdentifier")


class Profile(BaseModel):
    """A Nightscout profile record; only ``loopSettings`` is read here."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    loop_settings: LoopSettings | None = Field(default=None, alias="loopSettings")


__all__ = ["LoopSettings", "Profile"]
