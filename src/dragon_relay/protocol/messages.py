from __future__ import annotations

from typing import Annotated, Literal, Optional, TypeAlias, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter

# Normalized coordinates:
# - x,y in [0,1] relative to the sender's own canvas
# - receivers denormalize against their own canvas size
Norm = Annotated[float, Field(ge=0.0, le=1.0, allow_inf_nan=False)]


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class JoinRoom(_Wire):
    t: Literal["join-room"]
    room: Optional[str] = None


class JoinDisplayRoom(_Wire):
    t: Literal["join-display-room"]
    room: Optional[str] = None


class CursorPosition(_Wire):
    t: Literal["cursor-position"]
    x: Norm
    y: Norm


class Drawing(_Wire):
    t: Literal["drawing"]
    x1: Norm
    y1: Norm
    x2: Norm
    y2: Norm
    stroke_weight: Optional[Annotated[float, Field(gt=0.0, allow_inf_nan=False)]] = Field(
        default=None,
        validation_alias=AliasChoices("strokeWeight", "weight", "stroke_weight"),
        serialization_alias="strokeWeight",
    )


class Clear(_Wire):
    t: Literal["clear"]


class Sender(_Wire):
    """Identity fields the server stamps onto every routed event."""

    sender_id: str = Field(alias="senderId")
    color: str
    color_index: int = Field(alias="colorIndex", ge=0)


class RoutedCursorPosition(Sender):
    t: Literal["cursor-position"] = "cursor-position"
    x: Norm
    y: Norm


class RoutedDrawing(Sender):
    t: Literal["drawing"] = "drawing"
    x1: Norm
    y1: Norm
    x2: Norm
    y2: Norm
    stroke_weight: float = Field(alias="strokeWeight", gt=0.0)


class ClientDisconnected(_Wire):
    t: Literal["client-disconnected"] = "client-disconnected"
    sender_id: str = Field(alias="senderId")


class AssignedIdentity(_Wire):
    t: Literal["assigned-identity"] = "assigned-identity"
    color: str
    color_index: int = Field(alias="colorIndex", ge=0)
    canvas_config: dict = Field(alias="canvasConfig")
    drawing_config: dict = Field(alias="drawingConfig")
    ui_config: dict = Field(alias="uiConfig")


InboundMsg: TypeAlias = Annotated[
    Union[JoinRoom, JoinDisplayRoom, CursorPosition, Drawing, Clear],
    Field(discriminator="t"),
]
DisplayMsg: TypeAlias = Annotated[
    Union[RoutedCursorPosition, RoutedDrawing, Clear, ClientDisconnected],
    Field(discriminator="t"),
]

INBOUND = TypeAdapter(InboundMsg)
DISPLAY = TypeAdapter(DisplayMsg)
