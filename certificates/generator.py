"""
Генератор номеров сертификатов и публичных ссылок.
"""

import re
import secrets
import string
from datetime import date
from typing import Optional, Set
from .models import CertificateType, TYPE_PREFIXES
from .exceptions import GenerationError


class CertificateIDGenerator:
    """Генератор уникальных идентификаторов сертификатов."""

    NUMBER_PATTERN = re.compile(r'^AAA-(IM|AC|OM)-\d{4}-[A-Z0-9]{6}$')

    def __init__(self):
        # Символы суффикса номера (латинские буквы в верхнем регистре + цифры)
        self.number_characters = string.ascii_uppercase + string.digits
        # URL-безопасный алфавит для публичной ссылки
        self.slug_characters = string.ascii_letters + string.digits + "_-"
        self.number_suffix_length = 6
        self.slug_length = 12
        self.max_attempts = 1000  # Предел попыток при проверке по известным значениям

    def generate_certificate_number(self, certificate_type: CertificateType,
                                    year: Optional[int] = None) -> str:
        """
        Генерирует номер сертификата.

        Формат: AAA-{PREFIX}-{YEAR}-XXXXXX, где PREFIX: IM, AC или OM.

        Args:
            certificate_type: Тип сертификата
            year: Год выдачи (по умолчанию текущий)

        Returns:
            str: Номер сертификата
        """
        try:
            prefix = TYPE_PREFIXES[CertificateType(certificate_type)]
        except (KeyError, ValueError):
            raise GenerationError(f"Неизвестный тип сертификата: {certificate_type}")

        if year is None:
            year = date.today().year

        suffix = self._random_string(self.number_characters, self.number_suffix_length)
        return f"AAA-{prefix}-{year}-{suffix}"

    def generate_public_slug(self) -> str:
        """Генерирует 12-символьный публичный идентификатор для ссылки."""
        return self._random_string(self.slug_characters, self.slug_length)

    def generate_unique_number(self, certificate_type: CertificateType,
                               existing_numbers: Set[str] = None) -> str:
        """
        Генерирует номер, отсутствующий среди известных.

        Args:
            certificate_type: Тип сертификата
            existing_numbers: Множество занятых номеров

        Returns:
            str: Уникальный номер сертификата

        Raises:
            GenerationError: Если не удалось сгенерировать уникальный номер
        """
        if existing_numbers is None:
            existing_numbers = set()

        for attempt in range(self.max_attempts):
            number = self.generate_certificate_number(certificate_type)
            if number not in existing_numbers:
                return number

        raise GenerationError(
            f"Не удалось сгенерировать уникальный номер сертификата за {self.max_attempts} попыток"
        )

    def validate_number_format(self, certificate_number: str) -> bool:
        """
        Проверяет корректность формата номера сертификата.

        Args:
            certificate_number: Номер для проверки

        Returns:
            bool: True если формат корректен, False иначе
        """
        if not certificate_number:
            return False
        return bool(self.NUMBER_PATTERN.match(certificate_number))

    def _random_string(self, alphabet: str, length: int) -> str:
        return ''.join(secrets.choice(alphabet) for _ in range(length))


def main():
    """Демонстрация работы генератора."""
    generator = CertificateIDGenerator()

    print("Примеры номеров сертификатов:")
    for certificate_type in CertificateType:
        print(f"  {generator.generate_certificate_number(certificate_type)}")

    print(f"\nПример публичной ссылки: {generator.generate_public_slug()}")


if __name__ == "__main__":
    main()
