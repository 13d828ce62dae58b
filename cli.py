"""
CLI интерфейс реестра сертификатов
"""
import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from config.settings import Settings, get_settings
from certificates.database import DatabaseManager, CertificateRepository
from certificates.exceptions import CertificateError, ValidationError
from certificates.models import (
    CertificateFilter, CertificateRequest, CertificateStatus, CertificateType,
    calculate_expiration_date, format_certificate_date
)
from certificates.qr import QRCodeEncoder
from certificates.rasterizer import CertificateRasterizer
from certificates.renderer import TemplateRenderer
from certificates.service import CertificateService

# Демонстрационные сертификаты
DEMO_CERTIFICATES = [
    {
        "certificate_number": "AAA-IM-2024-DEMO01",
        "type": CertificateType.INDIVIDUAL_MEMBERSHIP,
        "organization_name": "John Smith Consulting",
        "address": "123 Business Ave, New York, NY 10001",
        "qualifications": "Certified Management Consultant",
        "issue_date": date(2024, 1, 15),
        "expiration_date": date(2026, 1, 15),
        "membership_date": date(2024, 1, 15),
        "public_slug": "demo-individual-001",
        "status": CertificateStatus.ACTIVE,
    },
    {
        "certificate_number": "AAA-AC-2024-DEMO02",
        "type": CertificateType.ACCREDITATION,
        "organization_name": "Excellence Labs Inc.",
        "address": "456 Innovation Blvd, San Francisco, CA 94102",
        "accredited_as": "ISO 17025:2017",
        "scope": "Chemical Testing Laboratory",
        "issue_no": "001",
        "issue_date": date(2024, 3, 1),
        "expiration_date": date(2027, 3, 1),
        "initial_accreditation_date": date(2024, 3, 1),
        "public_slug": "demo-accreditation-001",
        "status": CertificateStatus.ACTIVE,
    },
    {
        "certificate_number": "AAA-OM-2024-DEMO03",
        "type": CertificateType.ORGANIZATIONAL_MEMBERSHIP,
        "organization_name": "Global Tech Solutions",
        "address": "789 Enterprise Way, Austin, TX 78701",
        "issue_date": date(2024, 6, 1),
        "expiration_date": date(2025, 6, 1),
        "membership_date": date(2024, 6, 1),
        "public_slug": "demo-organizational-001",
        "status": CertificateStatus.ACTIVE,
    },
]


class CertificateCLI:
    """CLI интерфейс для работы с сертификатами"""

    def __init__(self, service: CertificateService = None, settings: Settings = None,
                 db_manager: DatabaseManager = None):
        self.settings = settings or get_settings()
        self.logger = logging.getLogger(__name__)
        self._db_manager = db_manager
        self._service = service

    def setup_logging(self):
        """Настройка логирования"""
        self.settings.create_directories()
        logging.basicConfig(
            level=getattr(logging, self.settings.log_level),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=[
                logging.FileHandler(self.settings.log_file, encoding='utf-8'),
                logging.StreamHandler()
            ]
        )

    @property
    def db_manager(self) -> DatabaseManager:
        if self._db_manager is None:
            self._db_manager = DatabaseManager(self.settings.database_url)
        return self._db_manager

    @property
    def service(self) -> CertificateService:
        if self._service is None:
            self._service = CertificateService(CertificateRepository(self.db_manager), settings=self.settings)
        return self._service

    def print_certificate(self, certificate):
        """Вывод данных сертификата"""
        print(f"  ID: {certificate.id}")
        print(f"  Номер: {certificate.certificate_number}")
        print(f"  Тип: {certificate.type_name}")
        print(f"  Организация: {certificate.organization_name}")
        print(f"  Адрес: {certificate.address}")
        print(f"  Период: {format_certificate_date(certificate.issue_date)} - "
              f"{format_certificate_date(certificate.expiration_date)}")
        print(f"  Статус: {certificate.status.value}")
        print(f"  Ссылка: {self.service.public_url(certificate)}")

    def init_db(self, args):
        """Создание таблиц"""
        if args.drop:
            self.db_manager.drop_tables()
        self.db_manager.create_tables()
        print("✓ Таблицы базы данных созданы")

    def seed(self, args):
        """Добавление демонстрационных сертификатов"""
        self.db_manager.create_tables()
        created = self.service.seed_certificates(DEMO_CERTIFICATES)
        print(f"✓ Добавлено демонстрационных сертификатов: {len(created)}")
        for certificate in created:
            print(f"  {certificate.certificate_number} -> {self.service.public_url(certificate)}")

    def create_certificate(self, args):
        """Создание сертификата через CLI"""
        certificate_type = CertificateType(args.type)
        expiration_date = args.expiration_date or calculate_expiration_date(args.issue_date, certificate_type)

        request = CertificateRequest(
            type=certificate_type,
            organization_name=args.organization,
            address=args.address,
            issue_date=args.issue_date,
            expiration_date=expiration_date,
            qualifications=args.qualifications,
            membership_date=args.membership_date,
            accredited_as=args.accredited_as,
            scope=args.scope,
            issue_no=args.issue_no,
            initial_accreditation_date=args.initial_accreditation_date
        )
        certificate = self.service.create_certificate(request)

        print("✓ Сертификат успешно создан:")
        self.print_certificate(certificate)

    def show_certificate(self, args):
        """Просмотр сертификата по номеру, slug или ID"""
        certificate = self.service.find_certificate(args.reference)
        print("✓ Сертификат найден:")
        self.print_certificate(certificate)

    def list_certificates(self, args):
        """Список сертификатов"""
        filters = CertificateFilter(
            page=args.page,
            limit=args.limit,
            type=args.type,
            status=args.status,
            search=args.search
        )
        result = self.service.list_certificates(filters)

        if not result.certificates:
            print("  Сертификаты не найдены")
            return

        for certificate in result.certificates:
            print(f"  {certificate.certificate_number}  {certificate.status.value:<8}  "
                  f"{certificate.organization_name}")

        pagination = result.pagination
        print(f"Страница {pagination.page} из {pagination.pages}, всего {pagination.total}")

    def search(self, args):
        """Публичный поиск активного сертификата"""
        result = self.service.search_public(args.query)
        if not result.found:
            print(f"✗ Активный сертификат по запросу '{args.query}' не найден")
            return

        print("✓ Сертификат найден:")
        self.print_certificate(result.certificate)

    def set_status(self, args):
        """Смена статуса"""
        certificate = self.service.find_certificate(args.reference)
        certificate = self.service.set_status(certificate.id, args.status)
        print(f"✓ Статус {certificate.certificate_number}: {certificate.status.value}")

    def toggle(self, args):
        """Приостановка или активация"""
        certificate = self.service.find_certificate(args.reference)
        certificate = self.service.toggle_status(certificate.id)
        print(f"✓ Статус {certificate.certificate_number}: {certificate.status.value}")

    def delete(self, args):
        """Удаление сертификата"""
        certificate = self.service.find_certificate(args.reference)
        self.service.delete_certificate(certificate.id)
        print(f"✓ Сертификат {certificate.certificate_number} удален")

    def export(self, args):
        """Сохранение PNG сертификата"""
        certificate = self.service.find_certificate(args.reference)

        qr_code = QRCodeEncoder(size=self.settings.qr_size).encode_data_uri(self.service.public_url(certificate))
        layout = TemplateRenderer().render(certificate, qr_code=qr_code)
        if layout is None:
            print(f"✗ Нет шаблона для типа {certificate.type.value}")
            sys.exit(1)

        rasterizer = CertificateRasterizer(
            assets_path=self.settings.assets_path,
            fonts_path=self.settings.fonts_path,
            pixel_ratio=self.settings.render_pixel_ratio
        )
        output_dir = Path(args.output)
        output_dir.mkdir(parents=True, exist_ok=True)
        file_path = output_dir / f"{certificate.certificate_number}.png"
        file_path.write_bytes(rasterizer.rasterize(layout))

        print(f"✓ Сертификат сохранен: {file_path}")

    def stats(self, args):
        """Статистика сертификатов"""
        stats = self.service.get_statistics()
        print(f"Всего сертификатов: {stats.total_certificates}")
        print(f"Активных: {stats.active_certificates}")
        print(f"Приостановленных: {stats.paused_certificates}")
        for certificate_type, count in stats.by_type.items():
            print(f"  {certificate_type}: {count}")

        if stats.recent:
            print("Последние сертификаты:")
            for certificate in stats.recent:
                print(f"  {certificate.certificate_number}  {certificate.organization_name}")

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description="Реестр сертификатов American Accreditation Association",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Примеры использования:
  %(prog)s init-db
  %(prog)s seed
  %(prog)s create --type ACCREDITATION --organization "Excellence Labs Inc." --address "San Francisco" --issue-date 2024-03-01
  %(prog)s show AAA-AC-2024-DEMO02
  %(prog)s list --status ACTIVE --search labs
  %(prog)s toggle AAA-AC-2024-DEMO02
  %(prog)s export demo-accreditation-001 --output exports
            """
        )

        subparsers = parser.add_subparsers(dest='command', help='Доступные команды')
        types = [t.value for t in CertificateType]
        statuses = [s.value for s in CertificateStatus]

        init_parser = subparsers.add_parser('init-db', help='Создание таблиц БД')
        init_parser.add_argument('--drop', action='store_true', help='Удалить существующие таблицы')

        subparsers.add_parser('seed', help='Добавление демонстрационных сертификатов')

        # Команда создания
        create_parser = subparsers.add_parser('create', help='Создание нового сертификата')
        create_parser.add_argument('--type', required=True, choices=types, help='Тип сертификата')
        create_parser.add_argument('--organization', required=True, help='Название организации')
        create_parser.add_argument('--address', required=True, help='Адрес')
        create_parser.add_argument('--issue-date', required=True, type=date.fromisoformat, help='Дата выдачи (YYYY-MM-DD)')
        create_parser.add_argument('--expiration-date', type=date.fromisoformat,
                                   help='Дата окончания (по умолчанию по сроку типа)')
        create_parser.add_argument('--qualifications', help='Квалификации')
        create_parser.add_argument('--membership-date', type=date.fromisoformat, help='Дата вступления')
        create_parser.add_argument('--accredited-as', help='Аккредитован как')
        create_parser.add_argument('--scope', help='Область аккредитации')
        create_parser.add_argument('--issue-no', help='Номер выпуска')
        create_parser.add_argument('--initial-accreditation-date', type=date.fromisoformat,
                                   help='Дата первичной аккредитации')

        show_parser = subparsers.add_parser('show', help='Просмотр сертификата')
        show_parser.add_argument('reference', help='Номер, slug или ID сертификата')

        list_parser = subparsers.add_parser('list', help='Список сертификатов')
        list_parser.add_argument('--page', type=int, default=1, help='Номер страницы')
        list_parser.add_argument('--limit', type=int, default=self.settings.default_page_size, help='Размер страницы')
        list_parser.add_argument('--type', choices=types, help='Фильтр по типу')
        list_parser.add_argument('--status', choices=statuses, help='Фильтр по статусу')
        list_parser.add_argument('--search', help='Поиск по названию или номеру')

        search_parser = subparsers.add_parser('search', help='Публичный поиск')
        search_parser.add_argument('query', help='Название организации или номер')

        status_parser = subparsers.add_parser('set-status', help='Смена статуса')
        status_parser.add_argument('reference', help='Номер, slug или ID сертификата')
        status_parser.add_argument('status', help='Новый статус')

        toggle_parser = subparsers.add_parser('toggle', help='Приостановка или активация')
        toggle_parser.add_argument('reference', help='Номер, slug или ID сертификата')

        delete_parser = subparsers.add_parser('delete', help='Удаление сертификата')
        delete_parser.add_argument('reference', help='Номер, slug или ID сертификата')

        export_parser = subparsers.add_parser('export', help='Сохранение PNG сертификата')
        export_parser.add_argument('reference', help='Номер, slug или ID сертификата')
        export_parser.add_argument('--output', default='exports', help='Директория для PNG')

        subparsers.add_parser('stats', help='Статистика')

        return parser

    def main(self, argv=None):
        """Главная функция CLI"""
        parser = self.build_parser()
        args = parser.parse_args(argv)

        if not args.command:
            parser.print_help()
            return

        self.setup_logging()

        commands = {
            'init-db': self.init_db,
            'seed': self.seed,
            'create': self.create_certificate,
            'show': self.show_certificate,
            'list': self.list_certificates,
            'search': self.search,
            'set-status': self.set_status,
            'toggle': self.toggle,
            'delete': self.delete,
            'export': self.export,
            'stats': self.stats,
        }

        try:
            commands[args.command](args)
        except ValidationError as e:
            print(f"✗ Ошибка валидации: {e}")
            sys.exit(1)
        except CertificateError as e:
            print(f"✗ Ошибка: {e}")
            self.logger.error(f"Ошибка команды {args.command}: {e}")
            sys.exit(1)


def run():
    """Точка входа консольной команды"""
    CertificateCLI().main()


if __name__ == '__main__':
    run()
