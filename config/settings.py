"""
Настройки приложения, загружаемые из переменных окружения.
"""

import logging
from pathlib import Path
from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Настройки приложения."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Игнорировать дополнительные поля из .env
    )

    # Настройки базы данных
    db_url: Optional[str] = Field(default=None, description="Полный URL базы данных (перекрывает DB_*)")
    db_host: str = Field(default="localhost", description="Хост базы данных")
    db_port: int = Field(default=5432, description="Порт базы данных")
    db_name: str = Field(default="certificates_db", description="Имя базы данных")
    db_user: str = Field(default="certificates_user", description="Пользователь базы данных")
    db_password: str = Field(default="", description="Пароль базы данных")

    # Доступ администратора
    admin_api_key: Optional[str] = Field(default=None, description="Bearer-токен администратора")

    # Публичная часть
    public_base_url: str = Field(default="http://localhost:8000", description="Базовый URL публичных страниц")

    # Рендеринг сертификатов
    assets_path: Path = Field(default=Path("./assets"), description="Директория с фоновыми изображениями")
    fonts_path: Optional[Path] = Field(default=None, description="Директория со шрифтами TTF")
    render_pixel_ratio: int = Field(default=2, description="Множитель разрешения PNG")
    qr_size: int = Field(default=150, description="Размер QR-кода в пикселях")

    # Генерация идентификаторов
    identity_max_attempts: int = Field(default=5, description="Попыток генерации уникального номера")

    # Пагинация
    default_page_size: int = Field(default=10, description="Размер страницы по умолчанию")
    max_page_size: int = Field(default=100, description="Максимальный размер страницы")

    # Настройки логирования
    log_level: str = Field(default="INFO", description="Уровень логирования")
    log_file: Path = Field(default=Path("./logs/certificates.log"), description="Путь к файлу логов")

    # Настройки приложения
    debug: bool = Field(default=False, description="Режим отладки")
    cors_origins: str = Field(default="*", description="Разрешенные источники CORS через запятую")

    @property
    def database_url(self) -> str:
        """Возвращает URL подключения к базе данных."""
        if self.db_url:
            return self.db_url
        return f"postgresql+psycopg2://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def cors_origins_list(self) -> List[str]:
        """Возвращает список источников CORS."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def public_certificate_url(self, public_slug: str) -> str:
        """Возвращает публичную ссылку на сертификат."""
        return f"{self.public_base_url.rstrip('/')}/certificate/{public_slug}"

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Валидация уровня логирования."""
        level = v.upper().strip()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Некорректный уровень логирования: {v}")
        return level

    @field_validator('render_pixel_ratio', 'qr_size', 'identity_max_attempts', 'default_page_size', 'max_page_size')
    @classmethod
    def validate_positive(cls, v):
        """Числовые настройки должны быть положительными."""
        if v < 1:
            raise ValueError("Значение должно быть не меньше 1")
        return v

    def create_directories(self):
        """Создает необходимые директории."""
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        if not self.assets_path.exists():
            logger.warning(f"Директория с фоновыми изображениями не найдена: {self.assets_path}")


# Глобальная переменная с настройками
settings = Settings()


def get_settings() -> Settings:
    """Возвращает объект настроек."""
    return settings


def create_env_example():
    """Создает пример файла .env."""
    env_example_content = """# Настройки базы данных PostgreSQL
DB_HOST=localhost
DB_PORT=5432
DB_NAME=certificates_db
DB_USER=certificates_user
DB_PASSWORD=your_password_here
# DB_URL=sqlite:///./certificates.db

# Доступ администратора (Authorization: Bearer ...)
ADMIN_API_KEY=change_me

# Публичные ссылки и рендеринг
PUBLIC_BASE_URL=http://localhost:8000
ASSETS_PATH=./assets
RENDER_PIXEL_RATIO=2
QR_SIZE=150

# Настройки логирования
LOG_LEVEL=INFO
LOG_FILE=./logs/certificates.log

# Общие настройки
DEBUG=false
CORS_ORIGINS=*
"""

    with open(".env.example", "w", encoding="utf-8") as f:
        f.write(env_example_content)

    print("Создан файл .env.example с примером конфигурации")


if __name__ == "__main__":
    create_env_example()
