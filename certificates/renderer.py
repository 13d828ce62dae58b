"""
Отрисовка сертификата в позиционированный макет по шаблону его типа.
"""

import logging
from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from .models import CertificateType, format_certificate_date
from .layouts import CANVAS_HEIGHT, CANVAS_WIDTH, TEMPLATE_LAYOUTS

logger = logging.getLogger(__name__)

# Служебные ключи описания элемента, не попадающие в макет
_DESCRIPTOR_KEYS = ("field", "template", "optional")


class LayoutElement(BaseModel):
    """Элемент макета с фиксированной позицией."""
    name: str
    kind: str = Field(default="text", description="text или image")
    text: Optional[str] = None
    src: Optional[str] = None
    top: int
    left: int
    width: Optional[int] = None
    height: Optional[int] = None
    anchor: str = Field(default="left", description="left или center")
    font_size: int = 14
    font_weight: str = "normal"
    font_style: str = "normal"
    font_family: str = "serif"
    color: str = "#000000"
    background: Optional[str] = None


class RenderedLayout(BaseModel):
    """Полностью размещенный макет сертификата."""
    template: str
    certificate_type: CertificateType
    certificate_number: str
    width: int = CANVAS_WIDTH
    height: int = CANVAS_HEIGHT
    background_color: str = "#ffffff"
    background_image: Optional[str] = None
    elements: List[LayoutElement]

    def element(self, name: str) -> Optional[LayoutElement]:
        """Возвращает элемент по имени."""
        for element in self.elements:
            if element.name == name:
                return element
        return None


def validity_text(issue_date, expiration_date) -> str:
    """Срок действия как разница календарных лет: '1 Year', '3 Years'."""
    years = expiration_date.year - issue_date.year
    return f"{years} {'Years' if years > 1 else 'Year'}"


class TemplateRenderer:
    """Выбирает шаблон по типу сертификата и размещает значения полей."""

    def __init__(self, layouts: Dict = None):
        self.layouts = layouts if layouts is not None else TEMPLATE_LAYOUTS

    def render(self, certificate, qr_code: Optional[str] = None) -> Optional[RenderedLayout]:
        """
        Строит макет сертификата.

        Args:
            certificate: Сертификат
            qr_code: QR-код публичной ссылки (data URI), для шаблонов с QR

        Returns:
            Optional[RenderedLayout]: Макет или None для неизвестного типа
        """
        layout = self.layouts.get(certificate.type)
        if layout is None:
            logger.warning(f"Нет шаблона для типа сертификата: {certificate.type}")
            return None

        values = self._field_values(certificate, qr_code)
        elements = []

        for entry in layout["elements"]:
            field = entry.get("field")
            if entry.get("optional") and not values.get(field):
                continue

            element = {key: value for key, value in entry.items() if key not in _DESCRIPTOR_KEYS}
            element.setdefault("font_family", layout.get("font_family", "serif"))

            if element.get("kind") == "image":
                element["src"] = values.get(field)
            elif "template" in entry:
                element["text"] = entry["template"].format(**values)
            else:
                element["text"] = values.get(field, "")

            elements.append(LayoutElement(**element))

        return RenderedLayout(
            template=layout["name"],
            certificate_type=certificate.type,
            certificate_number=certificate.certificate_number,
            background_image=layout.get("background_image"),
            elements=elements
        )

    def _field_values(self, certificate, qr_code: Optional[str]) -> Dict[str, str]:
        """Готовит отображаемые значения полей."""
        membership_date = certificate.membership_date or certificate.issue_date

        return {
            "certificate_number": certificate.certificate_number,
            "issue_no": certificate.issue_no or "",
            "organization_name": certificate.organization_name,
            "address": certificate.address,
            "qualifications": certificate.qualifications or "",
            "accredited_as": certificate.accredited_as or "",
            "scope": certificate.scope or "",
            "issue_date": format_certificate_date(certificate.issue_date),
            "expiration_date": format_certificate_date(certificate.expiration_date),
            "membership_date": format_certificate_date(membership_date),
            "validity": validity_text(certificate.issue_date, certificate.expiration_date),
            "qr_code": qr_code or "",
        }
