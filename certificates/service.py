"""
Основная бизнес-логика для работы с сертификатами.
"""

import logging
from typing import Iterable, List, Optional
from config.settings import Settings, get_settings
from .models import (
    Certificate, CertificateRequest, CertificateUpdate, CertificateFilter, CertificatePage,
    CertificateStatistics, CertificateStatus, Pagination, PublicCertificateView, SearchResult
)
from .database import CertificateRepository, get_certificate_repo, Certificate as DBCertificate
from .generator import CertificateIDGenerator
from .validators import CertificateValidator
from .exceptions import (
    CertificateError, CertificateNotFoundError, ConflictError, DatabaseError, RestrictedCertificateError
)

# Настройка логирования
logger = logging.getLogger(__name__)

# Необязательные даты обнуляются, если форма их не прислала
NULLABLE_DATE_FIELDS = ("membership_date", "initial_accreditation_date")

# Поля, которые нельзя обнулить при редактировании
NON_NULLABLE_FIELDS = ("type", "organization_name", "address", "issue_date", "expiration_date", "status")


class CertificateService:
    """Сервис для работы с сертификатами."""

    def __init__(self, certificate_repo: CertificateRepository = None,
                 id_generator: CertificateIDGenerator = None,
                 validator: CertificateValidator = None,
                 settings: Settings = None):
        """Инициализация сервиса."""
        self.settings = settings or get_settings()
        self.certificate_repo = certificate_repo or get_certificate_repo()
        self.id_generator = id_generator or CertificateIDGenerator()
        self.validator = validator or CertificateValidator()

    def create_certificate(self, request: CertificateRequest) -> Certificate:
        """
        Создает новый сертификат со статусом ACTIVE.

        Номер и slug генерируются заново, если БД сообщает о нарушении
        уникальности, не более identity_max_attempts раз.

        Args:
            request: Запрос на создание сертификата

        Returns:
            Certificate: Созданный сертификат

        Raises:
            ValidationError: Не заполнены обязательные поля
            ConflictError: Не удалось подобрать уникальные номер и slug
            DatabaseError: При ошибке БД
        """
        self.validator.validate_create(request)
        logger.info(f"Создание сертификата {request.type.value} для {request.organization_name}")
        self.validator.check_expiration(request.type, request.issue_date, request.expiration_date)

        data = request.model_dump()
        rejected_numbers = set()

        for attempt in range(1, self.settings.identity_max_attempts + 1):
            certificate_number = self.id_generator.generate_unique_number(request.type, rejected_numbers)
            public_slug = self.id_generator.generate_public_slug()

            try:
                db_certificate = self.certificate_repo.create_certificate({
                    **data,
                    "certificate_number": certificate_number,
                    "public_slug": public_slug,
                    "status": CertificateStatus.ACTIVE
                })
            except ConflictError as e:
                logger.warning(f"Попытка {attempt}: {e}")
                rejected_numbers.add(certificate_number)
                continue
            except CertificateError:
                raise
            except Exception as e:
                logger.error(f"Ошибка создания сертификата: {e}")
                raise DatabaseError(f"Неожиданная ошибка при создании сертификата: {e}")

            certificate = self._convert_db_to_pydantic(db_certificate)
            logger.info(f"Сертификат {certificate.certificate_number} успешно создан")
            return certificate

        logger.error(f"Не удалось создать сертификат за {self.settings.identity_max_attempts} попыток")
        raise ConflictError("Could not allocate a unique certificate number")

    def get_certificate(self, certificate_id: str) -> Certificate:
        """
        Получает сертификат по ID.

        Raises:
            CertificateNotFoundError: Если сертификат не найден
        """
        db_certificate = self._call_repo(self.certificate_repo.get_certificate, certificate_id)
        if db_certificate is None:
            raise CertificateNotFoundError(f"Certificate {certificate_id} not found")
        return self._convert_db_to_pydantic(db_certificate)

    def find_certificate(self, reference: str) -> Certificate:
        """
        Находит сертификат по номеру, публичному slug или ID.

        Args:
            reference: Номер сертификата, slug или ID

        Returns:
            Certificate: Найденный сертификат
        """
        if self.id_generator.validate_number_format(reference):
            db_certificate = self._call_repo(self.certificate_repo.get_certificate_by_number, reference)
        else:
            db_certificate = (
                self._call_repo(self.certificate_repo.get_certificate, reference)
                or self._call_repo(self.certificate_repo.get_certificate_by_slug, reference)
            )

        if db_certificate is None:
            raise CertificateNotFoundError(f"Certificate {reference} not found")
        return self._convert_db_to_pydantic(db_certificate)

    def list_certificates(self, filters: CertificateFilter) -> CertificatePage:
        """
        Получает страницу сертификатов, новые первыми.

        Args:
            filters: Номер страницы, размер и фильтры

        Returns:
            CertificatePage: Сертификаты и параметры пагинации
        """
        limit = min(filters.limit, self.settings.max_page_size)
        offset = (filters.page - 1) * limit

        db_certificates, total = self._call_repo(
            self.certificate_repo.list_certificates,
            offset, limit,
            certificate_type=filters.type,
            status=filters.status,
            search=filters.search
        )

        return CertificatePage(
            certificates=[self._convert_db_to_pydantic(db_cert) for db_cert in db_certificates],
            pagination=Pagination.build(filters.page, limit, total)
        )

    def update_certificate(self, certificate_id: str, update: CertificateUpdate) -> Certificate:
        """
        Обновляет сертификат данными формы редактирования.

        Присланные поля перезаписываются. Необязательные даты, отсутствующие
        в запросе, обнуляются. Обязательные поля без значения не меняются.

        Raises:
            CertificateNotFoundError: Если сертификат не найден
        """
        logger.info(f"Редактирование сертификата {certificate_id}")

        provided = update.model_fields_set
        values = {}
        for field in CertificateUpdate.model_fields:
            value = getattr(update, field)
            if field in NON_NULLABLE_FIELDS:
                if value is not None:
                    values[field] = value
            elif field in provided:
                values[field] = value
            elif field in NULLABLE_DATE_FIELDS:
                values[field] = None

        db_certificate = self._call_repo(self.certificate_repo.update_certificate, certificate_id, values)
        if db_certificate is None:
            logger.warning(f"Сертификат {certificate_id} не найден для редактирования")
            raise CertificateNotFoundError(f"Certificate {certificate_id} not found")

        certificate = self._convert_db_to_pydantic(db_certificate)
        self.validator.check_expiration(certificate.type, certificate.issue_date, certificate.expiration_date)
        logger.info(f"Сертификат {certificate.certificate_number} обновлен")
        return certificate

    def set_status(self, certificate_id: str, status) -> Certificate:
        """
        Устанавливает статус сертификата. Переходы между статусами не ограничены.

        Raises:
            StatusValidationError: Недопустимый статус
            CertificateNotFoundError: Сертификат не найден
        """
        new_status = self.validator.validate_status(status)
        logger.info(f"Смена статуса сертификата {certificate_id} на {new_status.value}")

        db_certificate = self._call_repo(
            self.certificate_repo.update_certificate, certificate_id, {"status": new_status}
        )
        if db_certificate is None:
            raise CertificateNotFoundError(f"Certificate {certificate_id} not found")

        return self._convert_db_to_pydantic(db_certificate)

    def toggle_status(self, certificate_id: str) -> Certificate:
        """Переключает ACTIVE -> PAUSED, любой другой статус -> ACTIVE."""
        certificate = self.get_certificate(certificate_id)
        if certificate.status == CertificateStatus.ACTIVE:
            new_status = CertificateStatus.PAUSED
        else:
            new_status = CertificateStatus.ACTIVE
        return self.set_status(certificate_id, new_status)

    def delete_certificate(self, certificate_id: str) -> None:
        """
        Удаляет сертификат.

        Raises:
            CertificateNotFoundError: Если сертификат не найден (в т.ч. уже удален)
        """
        logger.info(f"Удаление сертификата {certificate_id}")

        deleted = self._call_repo(self.certificate_repo.delete_certificate, certificate_id)
        if not deleted:
            logger.warning(f"Сертификат {certificate_id} не найден для удаления")
            raise CertificateNotFoundError(f"Certificate {certificate_id} not found")

        logger.info(f"Сертификат {certificate_id} удален")

    def search_public(self, query: Optional[str]) -> SearchResult:
        """
        Публичный поиск: первый активный сертификат по названию или номеру.

        Args:
            query: Поисковый запрос (минимум 2 символа)

        Returns:
            SearchResult: Флаг и найденный сертификат
        """
        query = self.validator.validate_search_query(query)
        logger.info(f"Публичный поиск: {query}")

        db_certificate = self._call_repo(self.certificate_repo.find_first_active, query)
        if db_certificate is None:
            return SearchResult(found=False)

        return SearchResult(found=True, certificate=self._convert_db_to_pydantic(db_certificate))

    def view_public(self, public_slug: str) -> PublicCertificateView:
        """
        Открывает сертификат по публичной ссылке.

        Для приостановленных и отозванных сертификатов данные не возвращаются.

        Raises:
            CertificateNotFoundError: Если slug не найден
        """
        db_certificate = self._call_repo(self.certificate_repo.get_certificate_by_slug, public_slug)
        if db_certificate is None:
            raise CertificateNotFoundError(f"Certificate {public_slug} not found")

        certificate = self._convert_db_to_pydantic(db_certificate)
        if certificate.is_restricted:
            logger.info(f"Публичный просмотр закрыт: {public_slug} ({certificate.status.value})")
            return PublicCertificateView(
                restricted=True,
                status=certificate.status,
                message="This certificate is currently not available for viewing. "
                        "Please contact the American Accreditation Association for more information."
            )

        return PublicCertificateView(restricted=False, status=certificate.status, certificate=certificate)

    def get_public_certificate(self, public_slug: str) -> Certificate:
        """
        Возвращает сертификат для публичной отрисовки.

        Raises:
            CertificateNotFoundError: Если slug не найден
            RestrictedCertificateError: Если сертификат скрыт
        """
        view = self.view_public(public_slug)
        if view.restricted:
            raise RestrictedCertificateError(view.status)
        return view.certificate

    def get_statistics(self) -> CertificateStatistics:
        """Получает статистику для панели администратора."""
        logger.info("Получение статистики сертификатов")

        stats = self._call_repo(self.certificate_repo.get_statistics)
        stats["recent"] = [self._convert_db_to_pydantic(db_cert) for db_cert in stats["recent"]]
        return CertificateStatistics(**stats)

    def public_url(self, certificate: Certificate) -> str:
        """Возвращает публичную ссылку на сертификат."""
        return self.settings.public_certificate_url(certificate.public_slug)

    def seed_certificates(self, records: Iterable[dict]) -> List[Certificate]:
        """
        Добавляет сертификаты с заданными номерами и slug, пропуская существующие.

        Args:
            records: Данные сертификатов, включая certificate_number и public_slug

        Returns:
            List[Certificate]: Созданные сертификаты
        """
        created = []
        for record in records:
            if self._call_repo(self.certificate_repo.get_certificate_by_number, record["certificate_number"]):
                logger.info(f"Сертификат {record['certificate_number']} уже существует")
                continue

            db_certificate = self._call_repo(self.certificate_repo.create_certificate, dict(record))
            created.append(self._convert_db_to_pydantic(db_certificate))
            logger.info(f"Создан сертификат {record['certificate_number']}")

        return created

    def _call_repo(self, method, *args, **kwargs):
        """Вызывает метод репозитория, заворачивая сбои БД в DatabaseError."""
        try:
            return method(*args, **kwargs)
        except CertificateError:
            raise
        except Exception as e:
            logger.error(f"Ошибка БД в {getattr(method, '__name__', method)}: {e}")
            raise DatabaseError(f"Ошибка при обращении к БД: {e}")

    def _convert_db_to_pydantic(self, db_certificate: DBCertificate) -> Certificate:
        """
        Конвертирует объект БД в Pydantic модель.

        Args:
            db_certificate: Объект сертификата из БД

        Returns:
            Certificate: Pydantic модель сертификата
        """
        return Certificate.model_validate(db_certificate)


# Глобальный экземпляр сервиса создается при первом обращении
_certificate_service: Optional[CertificateService] = None


def get_certificate_service() -> CertificateService:
    """Возвращает экземпляр сервиса сертификатов."""
    global _certificate_service
    if _certificate_service is None:
        _certificate_service = CertificateService()
    return _certificate_service
