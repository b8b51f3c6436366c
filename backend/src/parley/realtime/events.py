"""Typed schemas for frames exchanged over the realtime connection.

Every frame is a JSON object tagged by ``type``. Client frames are validated
here before the relay sees them; server frames are built from the models
below so each event name has exactly one shape on the wire.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter


def _coerce_identifier(value: Any) -> Any:
    # Clients send numeric database ids as well as opaque strings.
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    return value


Identifier = Annotated[str, BeforeValidator(_coerce_identifier), Field(min_length=1, max_length=128)]


class _ClientFrame(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class JoinChat(_ClientFrame):
    type: Literal["join_chat"]
    room_id: Identifier = Field(alias="roomId")


class SendMessage(_ClientFrame):
    """Chat payload relayed verbatim, including any extra keys the client adds."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type: Literal["send_message"]
    room_id: Identifier = Field(alias="roomId")
    text: str = Field(max_length=10_000)
    translated_text: str | None = Field(default=None, alias="translatedText")

    def relay_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True, exclude={"type"})


class JoinVoiceRoom(_ClientFrame):
    type: Literal["join_voice_room"]
    room_id: Identifier = Field(alias="roomId")


class Signal(_ClientFrame):
    """Opaque peer-connection negotiation payload addressed to one session."""

    type: Literal["signal"]
    to: Identifier
    signal: Any


class Ping(_ClientFrame):
    type: Literal["ping"]


ClientEvent = Annotated[
    Union[JoinChat, SendMessage, JoinVoiceRoom, Signal, Ping],
    Field(discriminator="type"),
]

_client_event_adapter: TypeAdapter[ClientEvent] = TypeAdapter(ClientEvent)


def parse_client_event(payload: Any) -> ClientEvent:
    """Validate a decoded frame; raises ``pydantic.ValidationError`` when malformed."""

    return _client_event_adapter.validate_python(payload)


class ServerEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class Connected(ServerEvent):
    type: Literal["connected"] = "connected"
    session_id: str = Field(alias="sessionId")


class ReceiveMessage(ServerEvent):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type: Literal["receive_message"] = "receive_message"


class UserJoined(ServerEvent):
    type: Literal["user_joined"] = "user_joined"
    user_id: str = Field(alias="userId")


class RoomUsers(ServerEvent):
    type: Literal["room_users"] = "room_users"
    users: list[str]


class SignalRelay(ServerEvent):
    type: Literal["signal"] = "signal"
    sender: str = Field(alias="from")
    signal: Any


class UserDisconnected(ServerEvent):
    type: Literal["user_disconnected"] = "user_disconnected"
    user_id: str = Field(alias="userId")


class Pong(ServerEvent):
    type: Literal["pong"] = "pong"


class Error(ServerEvent):
    type: Literal["error"] = "error"
    detail: str


def describe_validation_error(exc: Exception) -> str:
    """Turn a pydantic validation error into a short client-facing message."""

    errors = getattr(exc, "errors", None)
    if not callable(errors):
        return "Invalid payload"
    parts = []
    for error in errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item is not None)
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid payload"


__all__ = [
    "ClientEvent",
    "JoinChat",
    "SendMessage",
    "JoinVoiceRoom",
    "Signal",
    "Ping",
    "parse_client_event",
    "ServerEvent",
    "Connected",
    "ReceiveMessage",
    "UserJoined",
    "RoomUsers",
    "SignalRelay",
    "UserDisconnected",
    "Pong",
    "Error",
    "describe_validation_error",
]
