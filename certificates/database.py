"""
Модели SQLAlchemy и репозиторий для работы с базой данных.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, List, Tuple
from sqlalchemy import (
    create_engine, Column, String, DateTime, Date, Text, Enum, Index, func, or_, text
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
from config.settings import get_settings
from .models import CertificateStatus, CertificateType
from .exceptions import ConflictError

logger = logging.getLogger(__name__)

# Базовый класс для моделей
Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Certificate(Base):
    """Модель сертификата."""

    __tablename__ = "certificates"

    # Основные поля
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    certificate_number = Column(String(32), unique=True, nullable=False, index=True)
    public_slug = Column(String(32), unique=True, nullable=False, index=True)
    type = Column(Enum(CertificateType, name="certificate_type"), nullable=False, index=True)
    status = Column(
        Enum(CertificateStatus, name="certificate_status"),
        nullable=False,
        default=CertificateStatus.ACTIVE,
        index=True
    )
    organization_name = Column(String(255), nullable=False)
    address = Column(Text, nullable=False)
    issue_date = Column(Date, nullable=False)
    expiration_date = Column(Date, nullable=False)

    # Поля, зависящие от типа
    qualifications = Column(Text, nullable=True)
    membership_date = Column(Date, nullable=True)
    accredited_as = Column(String(255), nullable=True)
    scope = Column(Text, nullable=True)
    issue_no = Column(String(64), nullable=True)
    initial_accreditation_date = Column(Date, nullable=True)

    # Метаданные
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    # Индексы для оптимизации поиска
    __table_args__ = (
        Index('idx_certificate_type_status', 'type', 'status'),
        Index('idx_certificate_created_at', 'created_at'),
    )

    def __repr__(self):
        return f"<Certificate(number={self.certificate_number}, status={self.status})>"


class DatabaseManager:
    """Менеджер для работы с базой данных."""

    def __init__(self, database_url: str = None):
        """
        Инициализация менеджера БД.

        Args:
            database_url: URL подключения к БД
        """
        if database_url is None:
            settings = get_settings()
            database_url = settings.database_url

        engine_options = {"pool_pre_ping": True, "echo": False}  # echo=True для отладки SQL запросов
        if database_url.startswith("sqlite"):
            engine_options["connect_args"] = {"check_same_thread": False}
            if database_url in ("sqlite://", "sqlite:///:memory:"):
                # Одно соединение на все потоки, иначе каждая сессия увидит пустую БД
                engine_options["poolclass"] = StaticPool
        else:
            engine_options["pool_recycle"] = 3600

        self.engine = create_engine(database_url, **engine_options)
        self.SessionLocal = sessionmaker(autoflush=False, expire_on_commit=False, bind=self.engine)

    def create_tables(self):
        """Создает все таблицы в базе данных."""
        Base.metadata.create_all(bind=self.engine)
        logger.info("Таблицы базы данных созданы успешно")

    def drop_tables(self):
        """Удаляет все таблицы из базы данных."""
        Base.metadata.drop_all(bind=self.engine)
        logger.info("Таблицы базы данных удалены")

    def get_session(self) -> Session:
        """Возвращает новую сессию для работы с БД."""
        return self.SessionLocal()

    def health_check(self) -> bool:
        """Проверяет подключение к базе данных."""
        try:
            with self.get_session() as session:
                session.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error(f"Ошибка подключения к БД: {e}")
            return False


class CertificateRepository:
    """Репозиторий для работы с сертификатами."""

    def __init__(self, db_manager: DatabaseManager):
        """
        Инициализация репозитория.

        Args:
            db_manager: Менеджер базы данных
        """
        self.db_manager = db_manager

    def create_certificate(self, certificate_data: dict) -> Certificate:
        """
        Создает новый сертификат.

        Args:
            certificate_data: Данные сертификата

        Returns:
            Certificate: Созданный сертификат

        Raises:
            ConflictError: Номер или slug уже заняты
        """
        with self.db_manager.get_session() as session:
            certificate = Certificate(**certificate_data)
            session.add(certificate)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise ConflictError(f"Нарушение уникальности при создании сертификата: {e.orig}")
            return certificate

    def get_certificate(self, certificate_id: str) -> Optional[Certificate]:
        """
        Получает сертификат по внутреннему ID.

        Args:
            certificate_id: ID сертификата

        Returns:
            Optional[Certificate]: Сертификат или None
        """
        with self.db_manager.get_session() as session:
            return session.get(Certificate, certificate_id)

    def get_certificate_by_slug(self, public_slug: str) -> Optional[Certificate]:
        """Получает сертификат по публичному slug."""
        with self.db_manager.get_session() as session:
            return session.query(Certificate).filter(
                Certificate.public_slug == public_slug
            ).first()

    def get_certificate_by_number(self, certificate_number: str) -> Optional[Certificate]:
        """Получает сертификат по номеру."""
        with self.db_manager.get_session() as session:
            return session.query(Certificate).filter(
                Certificate.certificate_number == certificate_number
            ).first()

    def list_certificates(self, offset: int, limit: int,
                          certificate_type: CertificateType = None,
                          status: CertificateStatus = None,
                          search: str = None) -> Tuple[List[Certificate], int]:
        """
        Получает страницу сертификатов с фильтрами.

        Args:
            offset: Сколько записей пропустить
            limit: Размер страницы
            certificate_type: Фильтр по типу
            status: Фильтр по статусу
            search: Подстрока названия организации или номера

        Returns:
            Tuple[List[Certificate], int]: Сертификаты страницы и общее количество
        """
        with self.db_manager.get_session() as session:
            query = self._apply_filters(session.query(Certificate), certificate_type, status, search)
            total = query.count()
            certificates = (
                query.order_by(Certificate.created_at.desc(), Certificate.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
            return certificates, total

    def find_first_active(self, search: str) -> Optional[Certificate]:
        """
        Находит первый активный сертификат по подстроке названия или номера.

        При нескольких совпадениях возвращается самый новый.
        """
        with self.db_manager.get_session() as session:
            query = self._apply_filters(
                session.query(Certificate), status=CertificateStatus.ACTIVE, search=search
            )
            return query.order_by(Certificate.created_at.desc(), Certificate.id.desc()).first()

    def update_certificate(self, certificate_id: str, values: dict) -> Optional[Certificate]:
        """
        Обновляет поля сертификата.

        Args:
            certificate_id: ID сертификата
            values: Новые значения полей

        Returns:
            Optional[Certificate]: Обновленный сертификат или None если не найден
        """
        with self.db_manager.get_session() as session:
            certificate = session.get(Certificate, certificate_id)
            if certificate is None:
                return None

            for field, value in values.items():
                setattr(certificate, field, value)

            session.commit()
            return certificate

    def delete_certificate(self, certificate_id: str) -> bool:
        """
        Удаляет сертификат без возможности восстановления.

        Returns:
            bool: True если удален, False если не найден
        """
        with self.db_manager.get_session() as session:
            certificate = session.get(Certificate, certificate_id)
            if certificate is None:
                return False

            session.delete(certificate)
            session.commit()
            return True

    def get_statistics(self, recent_limit: int = 5) -> dict:
        """
        Получает статистику по сертификатам.

        Returns:
            dict: Статистика
        """
        with self.db_manager.get_session() as session:
            total_certificates = session.query(Certificate).count()
            active_certificates = session.query(Certificate).filter(
                Certificate.status == CertificateStatus.ACTIVE
            ).count()
            paused_certificates = session.query(Certificate).filter(
                Certificate.status == CertificateStatus.PAUSED
            ).count()
            by_type = dict(
                session.query(Certificate.type, func.count(Certificate.id))
                .group_by(Certificate.type)
                .all()
            )
            recent = (
                session.query(Certificate)
                .order_by(Certificate.created_at.desc(), Certificate.id.desc())
                .limit(recent_limit)
                .all()
            )

            return {
                "total_certificates": total_certificates,
                "active_certificates": active_certificates,
                "paused_certificates": paused_certificates,
                "by_type": {cert_type.value: by_type.get(cert_type, 0) for cert_type in CertificateType},
                "recent": recent
            }

    @staticmethod
    def _apply_filters(query, certificate_type: CertificateType = None,
                       status: CertificateStatus = None, search: str = None):
        """Добавляет к запросу фильтры (условия объединяются через AND)."""
        if certificate_type:
            query = query.filter(Certificate.type == certificate_type)

        if status:
            query = query.filter(Certificate.status == status)

        if search:
            query = query.filter(or_(
                Certificate.organization_name.icontains(search, autoescape=True),
                Certificate.certificate_number.icontains(search, autoescape=True)
            ))

        return query


# Глобальный менеджер БД создается при первом обращении
_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    """Возвращает менеджер БД."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


def get_certificate_repo() -> CertificateRepository:
    """Возвращает репозиторий сертификатов."""
    return CertificateRepository(get_db_manager())


if __name__ == "__main__":
    # Тестирование подключения к БД
    manager = get_db_manager()
    if manager.health_check():
        print("✓ Подключение к базе данных успешно")
        manager.create_tables()
    else:
        print("✗ Не удалось подключиться к базе данных")
