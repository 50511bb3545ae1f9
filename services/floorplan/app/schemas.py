from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class LayoutModel(BaseModel):
    # Unknown keys in create bodies are ignored rather than rejected.
    model_config = ConfigDict(extra="ignore")


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class Seat(LayoutModel):
    auto_increment: int = 0
    company_code: int = 0
    seat_code: int = 0
    seat_title: str = ""
    title_background_color: str = ""
    title_text_color: str = ""
    seat_background_color: str = ""
    seat_top: int = 0
    seat_left: int = 0
    seat_width: int = 0
    seat_height: int = 0
    gender: int = 0
    waiting: int = 0
    release: int = 0
    hide_title: int = 0
    transparent_background: int = 0
    hide_border: int = 0
    kiosk_disabled: int = 0
    power_control: int = 0
    breaker_number: int = 0


class Room(LayoutModel):
    auto_increment: int = 0
    company_code: int = 0
    room_code: int = 0
    room_title: str = ""
    title_background_color: str = ""
    title_text_color: str = ""
    room_background_color: str = ""
    room_top: int = 0
    room_left: int = 0
    room_width: int = 0
    room_height: int = 0
    gender: int = 0
    waiting: int = 0
    release: int = 0
    hide_title: int = 0
    transparent_background: int = 0
    hide_border: int = 0
    kiosk_disabled: int = 0
    power_control: int = 0
    breaker_number: int = 0


class SeatField(StrEnum):
    """Columns a PUT /seats/{seat_code} body may change."""

    COMPANY_CODE = "company_code"
    SEAT_TITLE = "seat_title"
    SEAT_BACKGROUND_COLOR = "seat_background_color"
    SEAT_TOP = "seat_top"
    SEAT_LEFT = "seat_left"
    SEAT_WIDTH = "seat_width"
    SEAT_HEIGHT = "seat_height"
    TITLE_BACKGROUND_COLOR = "title_background_color"
    TITLE_TEXT_COLOR = "title_text_color"
    GENDER = "gender"
    WAITING = "waiting"
    RELEASE = "release"
    HIDE_TITLE = "hide_title"
    TRANSPARENT_BACKGROUND = "transparent_background"
    HIDE_BORDER = "hide_border"
    KIOSK_DISABLED = "kiosk_disabled"
    POWER_CONTROL = "power_control"
    BREAKER_NUMBER = "breaker_number"


class RoomField(StrEnum):
    """Columns a PUT /rooms/{room_code} body may change."""

    COMPANY_CODE = "company_code"
    ROOM_TITLE = "room_title"
    ROOM_BACKGROUND_COLOR = "room_background_color"
    ROOM_TOP = "room_top"
    ROOM_LEFT = "room_left"
    ROOM_WIDTH = "room_width"
    ROOM_HEIGHT = "room_height"
    TITLE_BACKGROUND_COLOR = "title_background_color"
    TITLE_TEXT_COLOR = "title_text_color"
    GENDER = "gender"
    WAITING = "waiting"
    RELEASE = "release"
    HIDE_TITLE = "hide_title"
    TRANSPARENT_BACKGROUND = "transparent_background"
    HIDE_BORDER = "hide_border"
    KIOSK_DISABLED = "kiosk_disabled"
    POWER_CONTROL = "power_control"
    BREAKER_NUMBER = "breaker_number"


# Partial-update payloads: only keys that were sent are set, and each is typed.
# Field names must stay in sync with SeatField / RoomField.


class SeatUpdate(StrictModel):
    company_code: int | None = None
    seat_title: str | None = None
    seat_background_color: str | None = None
    seat_top: int | None = None
    seat_left: int | None = None
    seat_width: int | None = None
    seat_height: int | None = None
    title_background_color: str | None = None
    title_text_color: str | None = None
    gender: int | None = None
    waiting: int | None = None
    release: int | None = None
    hide_title: int | None = None
    transparent_background: int | None = None
    hide_border: int | None = None
    kiosk_disabled: int | None = None
    power_control: int | None = None
    breaker_number: int | None = None


class RoomUpdate(StrictModel):
    company_code: int | None = None
    room_title: str | None = None
    room_background_color: str | None = None
    room_top: int | None = None
    room_left: int | None = None
    room_width: int | None = None
    room_height: int | None = None
    title_background_color: str | None = None
    title_text_color: str | None = None
    gender: int | None = None
    waiting: int | None = None
    release: int | None = None
    hide_title: int | None = None
    transparent_background: int | None = None
    hide_border: int | None = None
    kiosk_disabled: int | None = None
    power_control: int | None = None
    breaker_number: int | None = None
