"""几何模型。

logo 与背景板的绝对像素矩形，坐标允许为负或超出画布。
"""

from pydantic import BaseModel, ConfigDict, Field


class Rect(BaseModel):
    """浮点像素矩形"""

    model_config = ConfigDict(frozen=True)

    x: float = Field(description="左上角 x")
    y: float = Field(description="左上角 y")
    w: float = Field(description="宽度")
    h: float = Field(description="高度")

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    def to_box(self) -> tuple[int, int, int, int]:
        """取整为 (left, top, right, bottom) 像素框"""
        left, top = round(self.x), round(self.y)
        return left, top, left + round(self.w), top + round(self.h)

    def contains(self, other: "Rect") -> bool:
        """是否完整包含另一个矩形"""
        return (
            self.x <= other.x
            and self.y <= other.y
            and self.right >= other.right
            and self.bottom >= other.bottom
        )


class Geometry(BaseModel):
    """单张图片的水印几何"""

    model_config = ConfigDict(frozen=True)

    logo_rect: Rect = Field(description="logo 矩形")
    plate_rect: Rect | None = Field(None, description="背景板矩形，未启用时为 None")
