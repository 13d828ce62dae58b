"""
Растеризация макета сертификата в PNG.
"""

import base64
import io
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from PIL import Image, ImageDraw, ImageFont
from .layouts import FONT_FILES
from .renderer import LayoutElement, RenderedLayout
from .exceptions import RenderError

logger = logging.getLogger(__name__)


class CertificateRasterizer:
    """Рисует макет на холсте фиксированного размера."""

    def __init__(self, assets_path: Optional[Path] = None, fonts_path: Optional[Path] = None,
                 pixel_ratio: int = 2, line_spacing: float = 1.25):
        self.assets_path = Path(assets_path) if assets_path else None
        self.fonts_path = Path(fonts_path) if fonts_path else None
        self.pixel_ratio = pixel_ratio
        self.line_spacing = line_spacing
        self._fonts: Dict[Tuple[str, int], ImageFont.ImageFont] = {}

    def rasterize(self, layout: RenderedLayout) -> bytes:
        """
        Рисует макет и возвращает PNG.

        Размер изображения: width * pixel_ratio x height * pixel_ratio.

        Args:
            layout: Размещенный макет сертификата

        Returns:
            bytes: Содержимое PNG

        Raises:
            RenderError: При ошибке отрисовки
        """
        scale = self.pixel_ratio
        size = (layout.width * scale, layout.height * scale)

        try:
            canvas = Image.new("RGB", size, layout.background_color)

            background = self._load_background(layout.background_image, size)
            if background is not None:
                canvas.paste(background, (0, 0))

            draw = ImageDraw.Draw(canvas)
            for element in layout.elements:
                if element.kind == "image":
                    self._draw_image(canvas, element)
                else:
                    self._draw_text(draw, element)

            buffer = io.BytesIO()
            canvas.save(buffer, format="PNG")
        except (OSError, ValueError) as e:
            logger.error(f"Ошибка растеризации сертификата {layout.certificate_number}: {e}")
            raise RenderError(f"Failed to render certificate image: {e}")

        logger.info(f"Сертификат {layout.certificate_number} растеризован ({size[0]}x{size[1]})")
        return buffer.getvalue()

    def _load_background(self, relative_path: Optional[str], size) -> Optional[Image.Image]:
        if not relative_path or self.assets_path is None:
            return None

        path = self.assets_path / relative_path
        if not path.exists():
            logger.debug(f"Фон шаблона не найден: {path}")
            return None

        with Image.open(path) as img:
            return img.convert("RGB").resize(size)

    def _draw_image(self, canvas: Image.Image, element: LayoutElement):
        if not element.src or not element.src.startswith("data:"):
            return

        scale = self.pixel_ratio
        payload = element.src.split(",", 1)[1]
        with Image.open(io.BytesIO(base64.b64decode(payload))) as img:
            img = img.convert("RGB").resize((element.width * scale, element.height * scale))
            canvas.paste(img, (element.left * scale, element.top * scale))

    def _draw_text(self, draw: ImageDraw.ImageDraw, element: LayoutElement):
        if not element.text:
            return

        scale = self.pixel_ratio
        font = self._font(element.font_family, element.font_size * scale)
        max_width = element.width * scale if element.width else None
        lines = self._wrap(draw, element.text, font, max_width)

        y = element.top * scale
        for line in lines:
            line_width = draw.textlength(line, font=font)
            x = element.left * scale
            if element.anchor == "center":
                x -= line_width / 2

            if element.background:
                padding = 4 * scale
                left, top, right, bottom = draw.textbbox((x, y), line, font=font)
                draw.rectangle(
                    [left - padding, top - padding, right + padding, bottom + padding],
                    fill=element.background
                )

            draw.text((x, y), line, font=font, fill=element.color)
            y += int(element.font_size * scale * self.line_spacing)

    def _wrap(self, draw: ImageDraw.ImageDraw, text: str, font, max_width: Optional[int]) -> List[str]:
        """Переносит текст по словам в пределах ширины элемента."""
        if max_width is None or draw.textlength(text, font=font) <= max_width:
            return [text]

        lines = []
        current = ""
        for word in text.split():
            candidate = f"{current} {word}".strip()
            if current and draw.textlength(candidate, font=font) > max_width:
                lines.append(current)
                current = word
            else:
                current = candidate
        if current:
            lines.append(current)
        return lines

    def _font(self, family: str, size: int):
        key = (family, size)
        if key not in self._fonts:
            self._fonts[key] = self._load_font(family, size)
        return self._fonts[key]

    def _load_font(self, family: str, size: int):
        filename = FONT_FILES.get(family)
        if filename and self.fonts_path is not None:
            path = self.fonts_path / filename
            if path.exists():
                return ImageFont.truetype(str(path), size)

        try:
            # Системный шрифт, если установлен
            return ImageFont.truetype(filename or "DejaVuSerif.ttf", size)
        except OSError:
            return ImageFont.load_default(size=size)
