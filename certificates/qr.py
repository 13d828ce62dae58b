"""
QR-коды публичных ссылок на сертификаты.
"""

import base64
import io
import qrcode
from PIL import Image


class QRCodeEncoder:
    """Кодирует URL в изображение QR-кода."""

    def __init__(self, size: int = 150, border: int = 2):
        self.size = size
        self.border = border

    def encode_image(self, url: str) -> Image.Image:
        """
        Строит изображение QR-кода.

        Args:
            url: Кодируемая ссылка

        Returns:
            Image.Image: Квадратное изображение size x size
        """
        qr = qrcode.QRCode(box_size=10, border=self.border)
        qr.add_data(url)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white").convert("RGB")
        return img.resize((self.size, self.size), Image.Resampling.NEAREST)

    def encode_data_uri(self, url: str) -> str:
        """Возвращает QR-код как data URI PNG."""
        buffer = io.BytesIO()
        self.encode_image(url).save(buffer, format="PNG")
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        return f"data:image/png;base64,{encoded}"
