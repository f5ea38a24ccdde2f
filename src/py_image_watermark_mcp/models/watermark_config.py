"""水印配置模型。

定义一次导出所使用的不可变配置：锚点、边距、logo 宽度、背景板和编码质量。
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


HEX_COLOR_PATTERN = r"^#?[0-9a-fA-F]{6}$"


class Anchor(str, Enum):
    """logo 放置的锚点角"""

    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"

    @property
    def is_right(self) -> bool:
        return "right" in self.value

    @property
    def is_bottom(self) -> bool:
        return "bottom" in self.value


class BackgroundPlate(BaseModel):
    """logo 背景板配置

    未启用时颜色、透明度和内边距均不生效。
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    enabled: bool = Field(False, description="是否绘制背景板")
    color_hex: str = Field(
        "#ffffff", pattern=HEX_COLOR_PATTERN, description="背景色，#RRGGBB"
    )
    opacity: float = Field(0.5, ge=0, le=1, description="背景板不透明度")
    padding_horizontal: float = Field(8, ge=0, description="水平内边距（像素）")
    padding_vertical: float = Field(8, ge=0, description="垂直内边距（像素）")


class WatermarkConfig(BaseModel):
    """单次导出的水印配置"""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    # 位置
    anchor: Anchor = Field(Anchor.TOP_LEFT, description="锚点角")
    margin_horizontal: float = Field(24, ge=0, description="水平边距（像素）")
    margin_vertical: float = Field(24, ge=0, description="垂直边距（像素）")

    # 尺寸
    logo_width_percent: float = Field(
        24, gt=0, description="logo 宽度占原图宽度的百分比"
    )

    # 背景板
    background: BackgroundPlate | None = Field(None, description="背景板配置")

    # 编码
    quality: float = Field(0.8, gt=0, le=1, description="基础编码质量")
    preserve_format: bool = Field(
        False, description="保持原格式与原质量，不做 JPEG 归一化和大小回退"
    )

    @property
    def background_enabled(self) -> bool:
        """背景板是否生效"""
        return self.background is not None and self.background.enabled
