"""
Тесты для CLI
"""
import pytest
from datetime import date
from unittest.mock import MagicMock

from cli import CertificateCLI, DEMO_CERTIFICATES
from certificates.exceptions import CertificateNotFoundError, SearchQueryError
from certificates.models import (
    Certificate, CertificatePage, CertificateStatus, CertificateType, Pagination, SearchResult
)


def sample_certificate(**overrides):
    data = {
        "id": "b3f1c2a4-0000-4000-8000-000000000002",
        "certificate_number": "AAA-AC-2024-DEMO02",
        "public_slug": "demo-accreditation-001",
        "type": CertificateType.ACCREDITATION,
        "status": CertificateStatus.ACTIVE,
        "organization_name": "Excellence Labs Inc.",
        "address": "456 Innovation Blvd, San Francisco, CA 94102",
        "issue_date": date(2024, 3, 1),
        "expiration_date": date(2027, 3, 1),
    }
    data.update(overrides)
    return Certificate(**data)


class TestCertificateCLI:
    """Тесты для CLI интерфейса с моком сервиса"""

    @pytest.fixture
    def mock_service(self):
        """Мок для сервиса"""
        mock = MagicMock()
        mock.public_url.return_value = "https://verify.example.org/certificate/demo-accreditation-001"
        return mock

    @pytest.fixture
    def cli(self, mock_service, settings):
        """Фикстура для CLI"""
        return CertificateCLI(service=mock_service, settings=settings)

    def test_create_certificate_success(self, cli, mock_service, capsys):
        """Тест создания сертификата с расчетом даты окончания"""
        mock_service.create_certificate.return_value = sample_certificate()

        cli.main([
            "create", "--type", "ACCREDITATION", "--organization", "Excellence Labs Inc.",
            "--address", "456 Innovation Blvd", "--issue-date", "2024-03-01", "--scope", "Chemical Testing"
        ])

        request = mock_service.create_certificate.call_args.args[0]
        assert request.type == CertificateType.ACCREDITATION
        assert request.expiration_date == date(2027, 3, 1)
        assert request.scope == "Chemical Testing"

        captured = capsys.readouterr()
        assert "✓ Сертификат успешно создан:" in captured.out
        assert "AAA-AC-2024-DEMO02" in captured.out

    def test_create_invalid_date(self, cli):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["create", "--type", "ACCREDITATION", "--organization", "Labs",
                      "--address", "Street", "--issue-date", "01.03.2024"])

        assert exc_info.value.code == 2

    def test_show_not_found(self, cli, mock_service, capsys):
        """Тест просмотра несуществующего сертификата"""
        mock_service.find_certificate.side_effect = CertificateNotFoundError("Certificate AAA-AC-2024-ZZZZZZ not found")

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["show", "AAA-AC-2024-ZZZZZZ"])

        assert exc_info.value.code == 1
        assert "✗ Ошибка:" in capsys.readouterr().out

    def test_list_certificates(self, cli, mock_service, capsys):
        mock_service.list_certificates.return_value = CertificatePage(
            certificates=[sample_certificate()],
            pagination=Pagination.build(1, 10, 1)
        )

        cli.main(["list", "--status", "ACTIVE", "--search", "labs"])

        filters = mock_service.list_certificates.call_args.args[0]
        assert filters.status == CertificateStatus.ACTIVE
        assert filters.search == "labs"
        captured = capsys.readouterr()
        assert "AAA-AC-2024-DEMO02" in captured.out
        assert "Страница 1 из 1, всего 1" in captured.out

    def test_search_short_query(self, cli, mock_service, capsys):
        mock_service.search_public.side_effect = SearchQueryError("Search query must be at least 2 characters")

        with pytest.raises(SystemExit):
            cli.main(["search", "a"])

        assert "✗ Ошибка валидации:" in capsys.readouterr().out

    def test_search_not_found(self, cli, mock_service, capsys):
        mock_service.search_public.return_value = SearchResult(found=False)

        cli.main(["search", "unknown"])

        assert "не найден" in capsys.readouterr().out

    def test_toggle(self, cli, mock_service, capsys):
        certificate = sample_certificate()
        mock_service.find_certificate.return_value = certificate
        mock_service.toggle_status.return_value = sample_certificate(status=CertificateStatus.PAUSED)

        cli.main(["toggle", "demo-accreditation-001"])

        mock_service.toggle_status.assert_called_once_with(certificate.id)
        assert "PAUSED" in capsys.readouterr().out

    def test_no_command_prints_help(self, cli, capsys):
        cli.main([])

        assert "init-db" in capsys.readouterr().out


class TestCertificateCLIWithDatabase:
    """Тесты CLI на тестовой БД"""

    @pytest.fixture
    def cli(self, service, settings, db_manager):
        return CertificateCLI(service=service, settings=settings, db_manager=db_manager)

    def test_seed_and_stats(self, cli, capsys):
        cli.main(["seed"])
        cli.main(["seed"])
        cli.main(["stats"])

        captured = capsys.readouterr()
        assert "✓ Добавлено демонстрационных сертификатов: 3" in captured.out
        assert "✓ Добавлено демонстрационных сертификатов: 0" in captured.out
        assert "Всего сертификатов: 3" in captured.out

    def test_set_status_and_delete(self, cli, service, capsys):
        service.seed_certificates(DEMO_CERTIFICATES)

        cli.main(["set-status", "AAA-IM-2024-DEMO01", "REVOKED"])
        assert service.find_certificate("AAA-IM-2024-DEMO01").status == CertificateStatus.REVOKED

        cli.main(["delete", "demo-individual-001"])
        with pytest.raises(CertificateNotFoundError):
            service.find_certificate("AAA-IM-2024-DEMO01")

        assert "✓ Сертификат AAA-IM-2024-DEMO01 удален" in capsys.readouterr().out

    def test_export_png(self, cli, service, tmp_path):
        """Тест сохранения PNG"""
        service.seed_certificates(DEMO_CERTIFICATES)
        output = tmp_path / "exports"

        cli.main(["export", "AAA-OM-2024-DEMO03", "--output", str(output)])

        file_path = output / "AAA-OM-2024-DEMO03.png"
        assert file_path.exists()
        assert file_path.read_bytes().startswith(b"\x89PNG")
