"""
Общие фикстуры для тестов
"""
import pytest
from datetime import date

from config.settings import Settings
from certificates.database import DatabaseManager, CertificateRepository
from certificates.models import CertificateRequest, CertificateType
from certificates.service import CertificateService


@pytest.fixture
def settings(tmp_path):
    """Настройки с БД в памяти"""
    assets_path = tmp_path / "assets"
    assets_path.mkdir()
    return Settings(
        _env_file=None,
        db_url="sqlite://",
        admin_api_key="test-api-key",
        public_base_url="https://verify.example.org",
        assets_path=assets_path,
        log_file=tmp_path / "logs" / "test.log"
    )


@pytest.fixture
def db_manager(settings):
    """БД SQLite в памяти с созданными таблицами"""
    manager = DatabaseManager(settings.database_url)
    manager.create_tables()
    yield manager
    manager.engine.dispose()


@pytest.fixture
def certificate_repo(db_manager):
    return CertificateRepository(db_manager)


@pytest.fixture
def service(certificate_repo, settings):
    """Сервис сертификатов поверх тестовой БД"""
    return CertificateService(certificate_repo, settings=settings)


@pytest.fixture
def accreditation_request():
    """Образец запроса на аккредитацию"""
    return CertificateRequest(
        type=CertificateType.ACCREDITATION,
        organization_name="Excellence Labs Inc.",
        address="456 Innovation Blvd, San Francisco, CA 94102",
        issue_date=date(2024, 3, 1),
        expiration_date=date(2027, 3, 1),
        accredited_as="ISO 17025:2017",
        scope="Chemical Testing Laboratory",
        issue_no="001"
    )


@pytest.fixture
def make_certificate(service):
    """Создает сертификат с переопределяемыми полями"""

    def _make(**overrides):
        data = {
            "type": CertificateType.ORGANIZATIONAL_MEMBERSHIP,
            "organization_name": "Global Tech Solutions",
            "address": "789 Enterprise Way, Austin, TX 78701",
            "issue_date": date(2024, 6, 1),
            "expiration_date": date(2025, 6, 1),
        }
        data.update(overrides)
        return service.create_certificate(CertificateRequest(**data))

    return _make
