"""
Основной модуль бизнес-логики реестра сертификатов.
"""

from .service import CertificateService, get_certificate_service
from .models import (
    Certificate, CertificateRequest, CertificateUpdate, CertificateFilter,
    CertificateStatus, CertificateType
)
from .generator import CertificateIDGenerator
from .validators import CertificateValidator
from .database import DatabaseManager, CertificateRepository, get_db_manager, get_certificate_repo
from .renderer import TemplateRenderer, RenderedLayout

__version__ = "1.0.0"

__all__ = [
    'CertificateService',
    'get_certificate_service',
    'Certificate',
    'CertificateRequest',
    'CertificateUpdate',
    'CertificateFilter',
    'CertificateStatus',
    'CertificateType',
    'CertificateIDGenerator',
    'CertificateValidator',
    'DatabaseManager',
    'CertificateRepository',
    'get_db_manager',
    'get_certificate_repo',
    'TemplateRenderer',
    'RenderedLayout'
]
