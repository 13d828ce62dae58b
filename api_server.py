"""
FastAPI сервер реестра сертификатов
"""
import logging
from datetime import datetime
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from config.settings import Settings, get_settings
from certificates.api import CertificateAPI
from certificates.database import DatabaseManager, CertificateRepository
from certificates.qr import QRCodeEncoder
from certificates.rasterizer import CertificateRasterizer
from certificates.renderer import TemplateRenderer
from certificates.service import CertificateService


def setup_logging(settings: Settings):
    """Настройка логирования"""
    settings.create_directories()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(settings.log_file, encoding='utf-8'),
            logging.StreamHandler()
        ]
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Создание FastAPI приложения"""
    settings = settings or get_settings()
    setup_logging(settings)

    # Настройка хранилища
    db_manager = DatabaseManager(settings.database_url)
    service = CertificateService(CertificateRepository(db_manager), settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Управление жизненным циклом приложения"""
        logging.info("Запуск API сервера...")
        db_manager.create_tables()
        logging.info("Таблицы БД готовы")

        yield

        logging.info("Остановка API сервера...")
        db_manager.engine.dispose()

    # Создание API
    certificate_api = CertificateAPI(
        service,
        renderer=TemplateRenderer(),
        qr_encoder=QRCodeEncoder(size=settings.qr_size),
        rasterizer=CertificateRasterizer(
            assets_path=settings.assets_path,
            fonts_path=settings.fonts_path,
            pixel_ratio=settings.render_pixel_ratio
        ),
        api_key=settings.admin_api_key,
        lifespan=lifespan
    )
    app = certificate_api.app
    app.state.certificate_api = certificate_api
    app.state.db_manager = db_manager

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Фоновые изображения шаблонов для HTML страниц
    if settings.assets_path.is_dir():
        app.mount("/assets", StaticFiles(directory=str(settings.assets_path)), name="assets")

    @app.get("/health", tags=["monitoring"])
    def health_check():
        """Проверка здоровья API и БД"""
        health_status = {
            "status": "checking",
            "timestamp": datetime.now().isoformat(),
            "components": {}
        }

        # Проверка API
        health_status["components"]["api"] = {
            "status": "healthy",
            "message": "API is running"
        }

        # Проверка БД
        if db_manager.health_check():
            health_status["components"]["database"] = {
                "status": "healthy",
                "message": "Database connection is active"
            }
        else:
            health_status["components"]["database"] = {
                "status": "unhealthy",
                "message": "Database is not reachable"
            }

        # Фоновые изображения необязательны: без них сертификат рисуется на белом
        if settings.assets_path.is_dir():
            health_status["components"]["assets"] = {
                "status": "healthy",
                "message": f"Assets directory exists: {settings.assets_path}"
            }
        else:
            health_status["components"]["assets"] = {
                "status": "degraded",
                "message": "Assets directory not found, certificates are drawn without backgrounds"
            }

        # Общий статус
        all_healthy = all(
            comp.get("status") in ("healthy", "degraded")
            for comp in health_status["components"].values()
        )

        health_status["status"] = "healthy" if all_healthy else "unhealthy"

        return JSONResponse(content=health_status, status_code=200 if all_healthy else 503)

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api_server:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug
    )
