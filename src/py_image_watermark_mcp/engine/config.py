"""配置构建器模块。

把控制面传入的扁平参数构建为不可变的水印配置，集成参数验证。
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError as CustomValidationError
from ..models.watermark_config import Anchor, BackgroundPlate, WatermarkConfig
from ..utils.logging_helpers import get_logger


logger = get_logger()


class ConfigBuilder:
    """水印配置构建器

    提供统一的配置构建接口，pydantic 的校验错误统一转换为
    ``ValidationError`` 并给出可读的字段信息。
    """

    def build(
        self,
        anchor: str | Anchor = Anchor.TOP_LEFT,
        margin_horizontal: float = 24,
        margin_vertical: float = 24,
        logo_width_percent: float = 24,
        quality: float = 0.8,
        background_enabled: bool = False,
        background_color: str = "#ffffff",
        background_opacity: float = 0.5,
        padding_horizontal: float = 8,
        padding_vertical: float = 8,
        preserve_format: bool = False,
    ) -> WatermarkConfig:
        """构建水印配置

        背景板参数只在 ``background_enabled`` 为真时生效，但仍会被校验。

        Args:
            anchor: 锚点角 top-left/top-right/bottom-left/bottom-right
            margin_horizontal: 水平边距（像素）
            margin_vertical: 垂直边距（像素）
            logo_width_percent: logo 宽度占原图宽度的百分比
            quality: 基础编码质量 (0, 1]
            background_enabled: 是否绘制背景板
            background_color: 背景色 #RRGGBB
            background_opacity: 背景板不透明度 [0, 1]
            padding_horizontal: 背景板水平内边距
            padding_vertical: 背景板垂直内边距
            preserve_format: 保持原格式编码

        Returns:
            WatermarkConfig: 构建的配置对象

        Raises:
            CustomValidationError: 参数验证失败
        """
        try:
            background = BackgroundPlate(
                enabled=background_enabled,
                color_hex=background_color,
                opacity=background_opacity,
                padding_horizontal=padding_horizontal,
                padding_vertical=padding_vertical,
            )
            return WatermarkConfig(
                anchor=anchor,
                margin_horizontal=margin_horizontal,
                margin_vertical=margin_vertical,
                logo_width_percent=logo_width_percent,
                background=background,
                quality=quality,
                preserve_format=preserve_format,
            )
        except PydanticValidationError as e:
            error_msg = self._format_validation_error(e)
            logger.warning(f"配置验证失败: {error_msg}")
            raise CustomValidationError(error_msg) from e

    def _format_validation_error(self, error: PydanticValidationError) -> str:
        """格式化验证错误"""
        messages = []
        for err in error.errors():
            field = ".".join(str(loc) for loc in err["loc"])
            msg = err["msg"]
            if field:
                messages.append(f"{field}: {msg}")
            else:
                messages.append(msg)
        return "; ".join(messages)


_default_builder = ConfigBuilder()


def build_config(**kwargs: Any) -> WatermarkConfig:
    """便捷的配置构建函数

    使用全局配置构建器实例构建配置。
    """
    return _default_builder.build(**kwargs)
