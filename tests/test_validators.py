"""
Тесты для модуля валидации и вспомогательных функций моделей
"""
import pytest
from datetime import date

from certificates.validators import CertificateValidator
from certificates.exceptions import MissingFieldsError, SearchQueryError, StatusValidationError, ValidationError
from certificates.models import (
    CertificateFilter, CertificateRequest, CertificateStatus, CertificateType,
    add_years, calculate_expiration_date, format_certificate_date
)


class TestCertificateValidator:
    """Тесты для класса CertificateValidator"""

    @pytest.fixture
    def validator(self):
        return CertificateValidator()

    def test_validate_create_missing_fields(self, validator):
        """Тест отсутствия обязательных полей"""
        request = CertificateRequest(type=CertificateType.ACCREDITATION, organization_name="Labs")

        with pytest.raises(MissingFieldsError) as exc_info:
            validator.validate_create(request)

        assert exc_info.value.fields == ["address", "issue_date", "expiration_date"]
        assert isinstance(exc_info.value, ValidationError)

    def test_blank_strings_are_missing(self, validator):
        """Тест пустых строк из формы"""
        request = CertificateRequest(
            type="ACCREDITATION",
            organization_name="   ",
            address="",
            issue_date="2024-03-01",
            expiration_date="2027-03-01"
        )

        assert request.missing_fields() == ["organization_name", "address"]
        with pytest.raises(ValidationError):
            validator.validate_create(request)

    def test_validate_create_complete(self, validator, accreditation_request):
        """Тест полного запроса"""
        validator.validate_create(accreditation_request)

    def test_validate_status(self, validator):
        """Тест допустимых статусов"""
        for status in ("ACTIVE", "PAUSED", "EXPIRED", "REVOKED"):
            assert validator.validate_status(status) == CertificateStatus(status)
        assert validator.validate_status(CertificateStatus.PAUSED) == CertificateStatus.PAUSED

    @pytest.mark.parametrize("status", [None, "", "active", "DELETED"])
    def test_validate_status_invalid(self, validator, status):
        """Тест недопустимых статусов"""
        with pytest.raises(StatusValidationError):
            validator.validate_status(status)

    def test_validate_search_query(self, validator):
        """Тест поискового запроса"""
        assert validator.validate_search_query("  ab  ") == "ab"

        for query in (None, "", "a", " a "):
            with pytest.raises(SearchQueryError, match="at least 2 characters"):
                validator.validate_search_query(query)

    def test_check_expiration_matches(self, validator):
        """Тест корректного срока действия"""
        warnings = validator.check_expiration(
            CertificateType.ACCREDITATION, date(2024, 3, 1), date(2027, 3, 1)
        )
        assert warnings == []

    def test_check_expiration_mismatch_only_warns(self, validator):
        """Тест несоответствия срока: только предупреждение"""
        warnings = validator.check_expiration(
            CertificateType.ORGANIZATIONAL_MEMBERSHIP, date(2024, 6, 1), date(2024, 1, 1)
        )
        assert len(warnings) == 2


class TestModelHelpers:
    """Тесты вспомогательных функций"""

    def test_calculate_expiration_date(self):
        issue_date = date(2024, 1, 15)

        assert calculate_expiration_date(issue_date, CertificateType.INDIVIDUAL_MEMBERSHIP) == date(2026, 1, 15)
        assert calculate_expiration_date(issue_date, CertificateType.ACCREDITATION) == date(2027, 1, 15)
        assert calculate_expiration_date(issue_date, CertificateType.ORGANIZATIONAL_MEMBERSHIP) == date(2025, 1, 15)

    def test_add_years_leap_day(self):
        assert add_years(date(2024, 2, 29), 1) == date(2025, 3, 1)
        assert add_years(date(2024, 2, 29), 4) == date(2028, 2, 29)

    def test_format_certificate_date(self):
        assert format_certificate_date(date(2024, 1, 5)) == "January 5, 2024"

    def test_filter_defaults(self):
        filters = CertificateFilter(search="   ")

        assert filters.page == 1
        assert filters.limit == 10
        assert filters.search is None
