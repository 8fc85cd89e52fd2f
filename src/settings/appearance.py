"""Wallpaper and font lookup tables plus per-run-mode appearance records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Mapping

DEFAULT_WALLPAPER_ID = "default"
DEFAULT_FONT_ID = "system"
DEFAULT_WALLPAPER_STYLE = "fill"
DEFAULT_FONT_SIZE = 16
DEFAULT_FONT_COLOR = "#ffffff"

WALLPAPER_STYLES: frozenset[str] = frozenset({"fill", "fit", "stretch", "tile", "center"})
RUN_MODES: tuple[str, ...] = ("home", "focus", "ambient")

WallpaperKind = Literal["image", "video"]


@dataclass(frozen=True)
class Wallpaper:
    id: str
    kind: WallpaperKind
    src: str
    tags: tuple[str, ...]
    category: str


@dataclass(frozen=True)
class Font:
    id: str
    label: str
    css: str


WALLPAPERS: dict[str, Wallpaper] = {
    item.id: item
    for item in (
        Wallpaper("default", "image", "/pomodoro/wallpapers/default.jpg", ("nature",), "static"),
        Wallpaper("space", "image", "/pomodoro/wallpapers/space.jpg", ("space",), "static"),
        Wallpaper("snow", "image", "/pomodoro/wallpapers/nature.jpeg", ("nature",), "static"),
        Wallpaper("forest", "image", "/pomodoro/wallpapers/forest.jpg", ("nature", "forest"), "static"),
        Wallpaper("mountain", "image", "/pomodoro/wallpapers/mountain.jpg", ("nature", "mountain"), "static"),
        Wallpaper("ocean", "image", "/pomodoro/wallpapers/ocean.jpg", ("nature", "ocean"), "static"),
        Wallpaper("city", "image", "/pomodoro/wallpapers/city.jpg", ("urban", "city"), "static"),
        Wallpaper("minimalist", "image", "/pomodoro/wallpapers/minimalist.jpg", ("minimalist",), "static"),
        Wallpaper("rainy", "video", "/pomodoro/wallpapers/rain-desktop.mp4", ("nature", "live"), "animated"),
        Wallpaper("meteor", "video", "/pomodoro/wallpapers/meteor.mp4", ("nature", "live"), "animated"),
        Wallpaper("evening", "video", "/pomodoro/wallpapers/evening.mp4", ("nature", "live"), "animated"),
        Wallpaper("cloudy", "video", "/pomodoro/wallpapers/cloudy.mp4", ("nature", "live"), "animated"),
        Wallpaper("ocean-waves", "video", "/pomodoro/wallpapers/ocean-waves.mp4", ("nature", "ocean", "live"), "animated"),
    )
}

# Alternate ids found in stored selections.
WALLPAPER_ALIASES: dict[str, str] = {"nature": "snow"}

FONTS: dict[str, Font] = {
    item.id: item
    for item in (
        Font("system", "System (default)", ""),
        Font("roboto", "Roboto", "'Roboto', sans-serif"),
        Font("inter", "Inter", "'Inter', sans-serif"),
        Font("playfair", "Playfair Display", "'Playfair Display', serif"),
        Font("lato", "Lato", "'Lato', sans-serif"),
        Font("montserrat", "Montserrat", "'Montserrat', sans-serif"),
        Font("opensans", "Open Sans", "'Open Sans', sans-serif"),
        Font("raleway", "Raleway", "'Raleway', sans-serif"),
        Font("nunito", "Nunito", "'Nunito', sans-serif"),
        Font("poppins", "Poppins", "'Poppins', sans-serif"),
    )
}


def resolve_wallpaper(wallpaper_id: str) -> Wallpaper:
    wallpaper_id = WALLPAPER_ALIASES.get(wallpaper_id, wallpaper_id)
    return WALLPAPERS.get(wallpaper_id, WALLPAPERS[DEFAULT_WALLPAPER_ID])


def resolve_font(font_id: str) -> Font:
    return FONTS.get(font_id, FONTS[DEFAULT_FONT_ID])


@dataclass(frozen=True)
class ModeAppearance:
    """Wallpaper and font choices for a single run mode."""
    wallpaper_id: str = DEFAULT_WALLPAPER_ID
    wallpaper_style: str = DEFAULT_WALLPAPER_STYLE
    font_id: str = DEFAULT_FONT_ID
    font_size: int = DEFAULT_FONT_SIZE
    font_color: str = DEFAULT_FONT_COLOR

    @property
    def wallpaper(self) -> Wallpaper:
        return resolve_wallpaper(self.wallpaper_id)

    @property
    def font(self) -> Font:
        return resolve_font(self.font_id)

    @classmethod
    def from_record(cls, record: Any) -> "ModeAppearance":
        if not isinstance(record, Mapping):
            return cls()
        wallpaper = record.get("wallpaper")
        font = record.get("font")
        if not isinstance(wallpaper, Mapping):
            wallpaper = {}
        if not isinstance(font, Mapping):
            font = {}

        style = wallpaper.get("wallpaperStyle")
        size = font.get("fontSize")
        return cls(
            wallpaper_id=_text_or(wallpaper.get("selectedWallpaper"), DEFAULT_WALLPAPER_ID),
            wallpaper_style=style if style in WALLPAPER_STYLES else DEFAULT_WALLPAPER_STYLE,
            font_id=_text_or(font.get("selectedFont"), DEFAULT_FONT_ID),
            font_size=size if isinstance(size, int) and not isinstance(size, bool) and size > 0 else DEFAULT_FONT_SIZE,
            font_color=_text_or(font.get("fontColor"), DEFAULT_FONT_COLOR),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "wallpaper": {
                "selectedWallpaper": self.wallpaper_id,
                "wallpaperStyle": self.wallpaper_style,
            },
            "font": {
                "selectedFont": self.font_id,
                "fontSize": self.font_size,
                "fontColor": self.font_color,
            },
        }


@dataclass(frozen=True)
class AppearanceSettings:
    home: ModeAppearance = ModeAppearance()
    focus: ModeAppearance = ModeAppearance()
    ambient: ModeAppearance = ModeAppearance()

    def for_mode(self, run_mode: str) -> ModeAppearance:
        if run_mode not in RUN_MODES:
            return self.home
        return getattr(self, run_mode)

    @classmethod
    def from_record(cls, record: Any) -> "AppearanceSettings":
        if not isinstance(record, Mapping):
            return cls()
        return cls(**{mode: ModeAppearance.from_record(record.get(mode)) for mode in RUN_MODES})

    def to_record(self) -> dict[str, Any]:
        return {mode: getattr(self, mode).to_record() for mode in RUN_MODES}


def _text_or(value: Any, fallback: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return fallback
