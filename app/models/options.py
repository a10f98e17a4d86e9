"""
Immutable option structures for the public pipeline operations.
"""
from typing import Union

from PIL import ImageColor
from pydantic import BaseModel, ConfigDict, Field


class Color(BaseModel):
    """An RGB color plus opacity in [0, 1]."""

    model_config = ConfigDict(frozen=True)

    r: int = Field(ge=0, le=255)
    g: int = Field(ge=0, le=255)
    b: int = Field(ge=0, le=255)
    opacity: float = Field(default=1.0, ge=0.0, le=1.0)

    @classmethod
    def parse(cls, value: Union[str, "Color"]) -> "Color":
        """Accepts anything PIL.ImageColor understands: '#ff0000', '#00000033', 'red', 'rgb(...)'."""
        if isinstance(value, Color):
            return value
        r, g, b, a = ImageColor.getcolor(value, "RGBA")
        return cls(r=r, g=g, b=b, opacity=a / 255.0)

    def with_opacity(self, opacity: float) -> "Color":
        return Color(r=self.r, g=self.g, b=self.b, opacity=opacity)

    @property
    def rgb(self) -> tuple[int, int, int]:
        return self.r, self.g, self.b

    @property
    def alpha(self) -> int:
        return int(self.opacity * 255 + 0.5)


BLACK = Color(r=0, g=0, b=0)


class RemovalOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    smooth_mask: bool = True
    enhance_edges: bool = True


class StrokeStyle(BaseModel):
    """Stroke widths in pixels at the point the stroke engine runs."""

    model_config = ConfigDict(frozen=True)

    inner_color: Color
    inner_width: float = Field(ge=0.0)
    outer_color: Color = BLACK
    outer_width: float = Field(default=0.0, ge=0.0)

    @property
    def inner_radius(self) -> int:
        return int(self.inner_width + 0.5)

    @property
    def outer_radius(self) -> int:
        # Cumulative: the outer band starts where the inner one does.
        return int(self.inner_width + self.outer_width + 0.5)


class StrokeOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    inner_color: Color
    inner_width: float = Field(ge=0.0)
    outer_color: Color = BLACK
    outer_width: float = Field(default=6.0, ge=0.0)
    outer_opacity: float = Field(default=0.2, ge=0.0, le=1.0)

    def to_style(self) -> StrokeStyle:
        return StrokeStyle(
            inner_color=self.inner_color,
            inner_width=self.inner_width,
            outer_color=self.outer_color.with_opacity(self.outer_opacity),
            outer_width=self.outer_width,
        )


class PrintOptions(BaseModel):
    """Physical output size and stroke widths, all lengths in millimetres."""

    model_config = ConfigDict(frozen=True)

    target_width_mm: float = Field(gt=0.0)
    target_height_mm: float = Field(gt=0.0)
    inner_color: Color
    outer_color: Color = BLACK
    inner_width_mm: float = Field(default=0.0, ge=0.0)
    outer_width_mm: float = Field(default=0.0, ge=0.0)
    outer_opacity: float = Field(default=0.2, ge=0.0, le=1.0)
    dpi: int = Field(default=300, gt=0)
    crop_to_fit: bool = False
