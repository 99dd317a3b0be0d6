"""Presence value object and the JSON commands built from it."""

from __future__ import annotations

import json
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from richpresence.ipc.constants import CMD_SET_ACTIVITY, RPC_VERSION


class ActivityType(IntEnum):
    """Activity kinds the peer knows how to render."""

    PLAYING = 0
    STREAMING = 1
    LISTENING = 2
    WATCHING = 3
    CUSTOM = 4
    COMPETING = 5


class StatusDisplayType(IntEnum):
    """Which activity field the peer shows in the member list."""

    NAME = 0
    STATE = 1
    DETAILS = 2


class Presence(BaseModel):
    """Rich status to broadcast on behalf of the host application.

    Empty strings and zero numbers mean "not set" and are left out of the
    wire message entirely. ``type`` is sent (together with
    ``status_display_type``) only when it is a known activity kind.
    """

    model_config = ConfigDict(frozen=True)

    type: int | None = Field(default=None, description="ActivityType value (0-5)")
    status_display_type: int = Field(default=StatusDisplayType.NAME)
    name: str = ""
    state: str = ""
    details: str = ""
    start_timestamp: int = Field(default=0, description="Epoch seconds; 0 means unset")
    end_timestamp: int = Field(default=0, description="Epoch seconds; 0 means unset")
    large_image_key: str = ""
    large_image_text: str = ""
    small_image_key: str = ""
    small_image_text: str = ""
    party_id: str = ""
    party_size: int = 0
    party_max: int = 0
    party_privacy: int = 0
    match_secret: str = ""
    join_secret: str = ""
    spectate_secret: str = ""
    instance: bool = False


def _compact(obj: dict[str, Any]) -> bytes:
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def build_activity(presence: Presence) -> dict[str, Any]:
    """Return the ``activity`` object for *presence*, omitting unset fields."""
    activity: dict[str, Any] = {}

    kind = presence.type
    if kind is not None and ActivityType.PLAYING <= kind <= ActivityType.COMPETING:
        activity["type"] = int(kind)
        activity["status_display_type"] = int(presence.status_display_type)

    for key in ("name", "state", "details"):
        value = getattr(presence, key)
        if value:
            activity[key] = value

    if presence.start_timestamp > 0 or presence.end_timestamp > 0:
        timestamps: dict[str, int] = {}
        if presence.start_timestamp > 0:
            timestamps["start"] = presence.start_timestamp
        if presence.end_timestamp > 0:
            timestamps["end"] = presence.end_timestamp
        activity["timestamps"] = timestamps

    assets = {
        wire_key: value
        for wire_key, value in (
            ("large_image", presence.large_image_key),
            ("large_text", presence.large_image_text),
            ("small_image", presence.small_image_key),
            ("small_text", presence.small_image_text),
        )
        if value
    }
    if assets:
        activity["assets"] = assets

    if (
        presence.party_id
        or (presence.party_size > 0 and presence.party_max > 0)
        or presence.party_privacy > 0
    ):
        party: dict[str, Any] = {}
        if presence.party_id:
            party["id"] = presence.party_id
        if presence.party_size > 0 and presence.party_max > 0:
            party["size"] = [presence.party_size, presence.party_max]
        if presence.party_privacy > 0:
            party["privacy"] = presence.party_privacy
        activity["party"] = party

    secrets = {
        wire_key: value
        for wire_key, value in (
            ("match", presence.match_secret),
            ("join", presence.join_secret),
            ("spectate", presence.spectate_secret),
        )
        if value
    }
    if secrets:
        activity["secrets"] = secrets

    activity["instance"] = presence.instance
    return activity


def build_set_activity(presence: Presence, *, nonce: int, pid: int) -> bytes:
    """Encode the ``SET_ACTIVITY`` command for *presence* as compact JSON."""
    return _compact(
        {
            "cmd": CMD_SET_ACTIVITY,
            "nonce": str(nonce),
            "args": {"pid": pid, "activity": build_activity(presence)},
        }
    )


def build_handshake(client_id: str) -> bytes:
    return _compact({"v": RPC_VERSION, "client_id": client_id})


__all__ = [
    "ActivityType",
    "Presence",
    "StatusDisplayType",
    "build_activity",
    "build_handshake",
    "build_set_activity",
]
