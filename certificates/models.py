"""
Pydantic модели для валидации и сериализации данных сертификатов.
"""

import math
from datetime import datetime, date
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class CertificateType(str, Enum):
    """Тип сертификата."""
    INDIVIDUAL_MEMBERSHIP = "INDIVIDUAL_MEMBERSHIP"
    ACCREDITATION = "ACCREDITATION"
    ORGANIZATIONAL_MEMBERSHIP = "ORGANIZATIONAL_MEMBERSHIP"


class CertificateStatus(str, Enum):
    """Статус сертификата, управляющий публичной видимостью."""
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    EXPIRED = "EXPIRED"
    REVOKED = "REVOKED"


# Префиксы номера сертификата
TYPE_PREFIXES: Dict[CertificateType, str] = {
    CertificateType.INDIVIDUAL_MEMBERSHIP: "IM",
    CertificateType.ACCREDITATION: "AC",
    CertificateType.ORGANIZATIONAL_MEMBERSHIP: "OM",
}

TYPE_DISPLAY_NAMES: Dict[CertificateType, str] = {
    CertificateType.INDIVIDUAL_MEMBERSHIP: "Individual Membership",
    CertificateType.ACCREDITATION: "Accreditation",
    CertificateType.ORGANIZATIONAL_MEMBERSHIP: "Organizational Membership",
}

# Срок действия в годах по типу
VALIDITY_YEARS: Dict[CertificateType, int] = {
    CertificateType.INDIVIDUAL_MEMBERSHIP: 2,
    CertificateType.ACCREDITATION: 3,
    CertificateType.ORGANIZATIONAL_MEMBERSHIP: 1,
}

# Статусы, при которых публичная страница показывает только уведомление
RESTRICTED_STATUSES = frozenset({CertificateStatus.PAUSED, CertificateStatus.REVOKED})

REQUIRED_FIELDS = ("type", "organization_name", "address", "issue_date", "expiration_date")


def add_years(value: date, years: int) -> date:
    """Прибавляет годы к дате; 29 февраля переходит на 1 марта."""
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        return date(value.year + years, 3, 1)


def calculate_expiration_date(issue_date: date, certificate_type: CertificateType) -> date:
    """
    Вычисляет дату окончания действия по типу сертификата.

    Args:
        issue_date: Дата выдачи
        certificate_type: Тип сертификата

    Returns:
        date: Дата окончания действия
    """
    return add_years(issue_date, VALIDITY_YEARS[certificate_type])


def format_certificate_date(value: date) -> str:
    """Форматирует дату для сертификата: January 15, 2024."""
    return f"{value.strftime('%B')} {value.day}, {value.year}"


class CertificateRequest(BaseModel):
    """Модель запроса на создание сертификата."""
    type: Optional[CertificateType] = Field(None, description="Тип сертификата")
    organization_name: Optional[str] = Field(None, max_length=255, description="Название организации")
    address: Optional[str] = Field(None, description="Адрес")
    issue_date: Optional[date] = Field(None, description="Дата выдачи")
    expiration_date: Optional[date] = Field(None, description="Дата окончания действия")
    qualifications: Optional[str] = Field(None, description="Квалификации")
    membership_date: Optional[date] = Field(None, description="Дата вступления")
    accredited_as: Optional[str] = Field(None, max_length=255, description="Аккредитован как")
    scope: Optional[str] = Field(None, description="Область аккредитации")
    issue_no: Optional[str] = Field(None, max_length=64, description="Номер выпуска")
    initial_accreditation_date: Optional[date] = Field(None, description="Дата первичной аккредитации")

    @field_validator('*', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        """Пустые строки из формы считаются незаполненными."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    def missing_fields(self) -> List[str]:
        """Возвращает список незаполненных обязательных полей."""
        return [name for name in REQUIRED_FIELDS if getattr(self, name) is None]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": "ACCREDITATION",
                "organization_name": "Excellence Labs Inc.",
                "address": "456 Innovation Blvd, San Francisco, CA 94102",
                "issue_date": "2024-03-01",
                "expiration_date": "2027-03-01",
                "accredited_as": "ISO 17025:2017",
                "scope": "Chemical Testing Laboratory",
                "issue_no": "001"
            }
        }
    )


class CertificateUpdate(CertificateRequest):
    """Модель запроса на редактирование (форма всегда отправляет все поля)."""
    status: Optional[CertificateStatus] = Field(None, description="Статус сертификата")


class StatusUpdateRequest(BaseModel):
    """Модель запроса смены статуса."""
    status: Optional[str] = Field(None, description="Новый статус")


class Certificate(BaseModel):
    """Модель сертификата."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    certificate_number: str = Field(..., description="Номер сертификата")
    public_slug: str = Field(..., description="Публичный идентификатор для ссылки")
    type: CertificateType
    status: CertificateStatus = CertificateStatus.ACTIVE
    organization_name: str
    address: str
    issue_date: date
    expiration_date: date
    qualifications: Optional[str] = None
    membership_date: Optional[date] = None
    accredited_as: Optional[str] = None
    scope: Optional[str] = None
    issue_no: Optional[str] = None
    initial_accreditation_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def type_name(self) -> str:
        """Возвращает отображаемое название типа."""
        return TYPE_DISPLAY_NAMES[self.type]

    @property
    def is_restricted(self) -> bool:
        """Проверяет, скрыт ли сертификат от публичного просмотра."""
        return self.status in RESTRICTED_STATUSES


class Pagination(BaseModel):
    """Параметры страницы результата."""
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit))


class CertificateFilter(BaseModel):
    """Модель параметров списка сертификатов."""
    page: int = Field(default=1, ge=1, description="Номер страницы (с 1)")
    limit: int = Field(default=10, ge=1, description="Размер страницы")
    type: Optional[CertificateType] = Field(None, description="Фильтр по типу")
    status: Optional[CertificateStatus] = Field(None, description="Фильтр по статусу")
    search: Optional[str] = Field(None, description="Поиск по названию или номеру")

    @field_validator('search')
    @classmethod
    def normalize_search(cls, v):
        if v is not None:
            v = v.strip()
        return v or None


class CertificatePage(BaseModel):
    """Страница списка сертификатов."""
    certificates: List[Certificate]
    pagination: Pagination


class SearchResult(BaseModel):
    """Результат публичного поиска."""
    found: bool
    certificate: Optional[Certificate] = None


class PublicCertificateView(BaseModel):
    """Результат открытия публичной ссылки."""
    restricted: bool
    status: CertificateStatus
    certificate: Optional[Certificate] = None
    message: Optional[str] = None


class CertificateStatistics(BaseModel):
    """Статистика для панели администратора."""
    total_certificates: int
    active_certificates: int
    paused_certificates: int
    by_type: Dict[str, int]
    recent: List[Certificate]
