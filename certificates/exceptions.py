"""
Кастомные исключения для системы сертификатов.
"""


class CertificateError(Exception):
    """Базовое исключение для всех ошибок сертификатов."""
    pass


class ValidationError(CertificateError):
    """Ошибка валидации входных данных."""
    pass


class MissingFieldsError(ValidationError):
    """Не заполнены обязательные поля."""

    def __init__(self, fields):
        self.fields = list(fields)
        super().__init__("Missing required fields: " + ", ".join(self.fields))


class StatusValidationError(ValidationError):
    """Недопустимое значение статуса."""
    pass


class SearchQueryError(ValidationError):
    """Слишком короткий поисковый запрос."""
    pass


class AuthError(CertificateError):
    """Запрос к защищенному ресурсу без сессии администратора."""
    pass


class CertificateNotFoundError(CertificateError):
    """Сертификат не найден."""
    pass


class RestrictedCertificateError(CertificateError):
    """Сертификат приостановлен или отозван и недоступен публично."""

    def __init__(self, status):
        self.status = status
        super().__init__(f"Certificate is {status.value.lower()}")


class ConflictError(CertificateError):
    """Нарушение уникальности номера сертификата или публичного slug."""
    pass


class DatabaseError(CertificateError):
    """Ошибка работы с базой данных."""
    pass


class GenerationError(CertificateError):
    """Ошибка генерации идентификаторов сертификата."""
    pass


class RenderError(CertificateError):
    """Ошибка отрисовки сертификата."""
    pass
