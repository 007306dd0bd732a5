from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, Field, PositiveInt, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dragon_relay.motion.creature import CreatureConfig


class CanvasConfig(BaseModel):
    # Dimensions are plain numbers; never expressions to be evaluated client-side.
    width: PositiveInt = 800
    height: PositiveInt = 600
    display_width: PositiveInt = 1920
    display_height: PositiveInt = 1080
    background_color: str = "#FFFFFF"


class DrawingConfig(BaseModel):
    stroke_weight: float = Field(default=3.0, gt=0.0)


class UIConfig(BaseModel):
    show_client_ids: bool = True
    client_id_length: int = Field(default=6, ge=0)
    clear_status_delay_ms: int = Field(default=2000, ge=0)


class Settings(BaseSettings):
    """
    Runtime config (server and display client).

    - Loaded from environment variables (nested sections use `__`,
      e.g. DRAGON_RELAY_CANVAS__WIDTH=1024)
    - Also reads `.env` if present (via pydantic-settings + python-dotenv)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DRAGON_RELAY_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    palette: list[str] = Field(
        default_factory=lambda: ["#E6194B", "#3CB44B", "#FFE119", "#4363D8", "#F58231", "#911EB4"],
        min_length=1,
    )

    # Closed set of input rooms, each mapped to the display rooms that watch it.
    rooms: dict[str, list[str]] = Field(
        default_factory=lambda: {
            "default": ["display"],
            "room1": ["display1"],
            "room2": ["display2"],
            "room3": ["display3"],
        }
    )
    default_room: str = "default"
    default_display_room: str = "display"

    canvas: CanvasConfig = Field(default_factory=CanvasConfig)
    drawing: DrawingConfig = Field(default_factory=DrawingConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    creature: CreatureConfig = Field(default_factory=CreatureConfig)

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)

    # Display client
    server_ws_url: str = "ws://127.0.0.1:8000/ws"
    display_fps: float = Field(default=60.0, gt=0.0)
    assets_dir: str = "assets"
    sprite_cols: PositiveInt = 9
    sprite_rows: PositiveInt = 1

    # Debugging
    debug_log_msgs: bool = False
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_rooms(self) -> "Settings":
        if self.default_room not in self.rooms:
            raise ValueError(f"default_room {self.default_room!r} is not one of {sorted(self.rooms)}")
        for room, displays in self.rooms.items():
            if not displays:
                raise ValueError(f"room {room!r} maps to no display rooms")
            # one delivery per display room, in first-listed order
            self.rooms[room] = list(dict.fromkeys(displays))
        return self

    def display_rooms(self) -> set[str]:
        out = {self.default_display_room}
        for displays in self.rooms.values():
            out.update(displays)
        return out


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
