"""
Модуль валидации входных данных для сертификатов.
"""

import logging
from datetime import date
from typing import List, Optional
from .models import (
    CertificateRequest, CertificateStatus, CertificateType, calculate_expiration_date
)
from .exceptions import MissingFieldsError, StatusValidationError, SearchQueryError

logger = logging.getLogger(__name__)


class CertificateValidator:
    """Валидатор данных сертификата."""

    def __init__(self, min_search_length: int = 2):
        self.min_search_length = min_search_length
        self.status_values = [status.value for status in CertificateStatus]

    def validate_create(self, request: CertificateRequest) -> None:
        """
        Проверяет наличие обязательных полей при создании.

        Args:
            request: Запрос на создание сертификата

        Raises:
            MissingFieldsError: Если не заполнены обязательные поля
        """
        missing = request.missing_fields()
        if missing:
            raise MissingFieldsError(missing)

    def validate_status(self, status: Optional[str]) -> CertificateStatus:
        """
        Проверяет значение статуса.

        Args:
            status: Значение статуса из запроса

        Returns:
            CertificateStatus: Статус

        Raises:
            StatusValidationError: Если статус не входит в допустимые значения
        """
        if isinstance(status, CertificateStatus):
            return status
        if not status or status not in self.status_values:
            raise StatusValidationError(f"Invalid status: {status!r}")
        return CertificateStatus(status)

    def validate_search_query(self, query: Optional[str]) -> str:
        """
        Проверяет поисковый запрос публичного поиска.

        Returns:
            str: Запрос без пробелов по краям

        Raises:
            SearchQueryError: Если запрос короче минимальной длины
        """
        query = (query or "").strip()
        if len(query) < self.min_search_length:
            raise SearchQueryError(
                f"Search query must be at least {self.min_search_length} characters"
            )
        return query

    def check_expiration(self, certificate_type: CertificateType,
                         issue_date: date, expiration_date: date) -> List[str]:
        """
        Сверяет дату окончания с нормативным сроком для типа.

        Несоответствие не является ошибкой: даты редактируются независимо.

        Returns:
            List[str]: Список предупреждений
        """
        warnings = []
        expected = calculate_expiration_date(issue_date, certificate_type)

        if expiration_date != expected:
            warnings.append(
                f"Дата окончания {expiration_date.isoformat()} не совпадает с ожидаемой "
                f"{expected.isoformat()} для типа {certificate_type.value}"
            )

        if expiration_date <= issue_date:
            warnings.append("Дата окончания не позже даты выдачи")

        for warning in warnings:
            logger.warning(warning)

        return warnings
