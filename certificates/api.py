"""
API и публичные страницы реестра сертификатов.
"""
import logging
import secrets
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fastapi.templating import Jinja2Templates

from .models import (
    Certificate, CertificateFilter, CertificatePage, CertificateRequest, CertificateStatistics,
    CertificateStatus, CertificateType, CertificateUpdate, PublicCertificateView, SearchResult,
    StatusUpdateRequest
)
from .service import CertificateService
from .renderer import TemplateRenderer, RenderedLayout
from .layouts import FONT_STACKS
from .qr import QRCodeEncoder
from .rasterizer import CertificateRasterizer
from .exceptions import (
    AuthError, CertificateNotFoundError, ConflictError, RenderError,
    RestrictedCertificateError, ValidationError
)

TEMPLATES_DIR = Path(__file__).parent / "templates"


class CertificateAPI:
    """API для работы с сертификатами"""

    def __init__(
            self,
            service: CertificateService,
            renderer: Optional[TemplateRenderer] = None,
            qr_encoder: Optional[QRCodeEncoder] = None,
            rasterizer: Optional[CertificateRasterizer] = None,
            api_key: Optional[str] = None,
            lifespan=None
    ):
        self.service = service
        self.renderer = renderer or TemplateRenderer()
        self.qr_encoder = qr_encoder or QRCodeEncoder()
        self.rasterizer = rasterizer or CertificateRasterizer()
        self.api_key = api_key
        self.logger = logging.getLogger(__name__)

        # Создание FastAPI приложения
        self.app = FastAPI(
            title="Certificate Registry API",
            description="API для выдачи и проверки сертификатов",
            version="1.0.0",
            lifespan=lifespan
        )

        self.templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
        self.templates.env.globals["font_stacks"] = FONT_STACKS

        self._setup_exception_handlers()
        self._setup_routes()

    def _verify_api_key(
            self,
            credentials: Optional[HTTPAuthorizationCredentials] = Depends(HTTPBearer(auto_error=False))
    ) -> bool:
        """Проверка API ключа администратора"""
        try:
            if not self.api_key:
                raise AuthError("Admin access is not configured")
            # Заголовки декодируются как latin-1, сравниваем байты
            if credentials is None or not secrets.compare_digest(
                    credentials.credentials.encode("utf-8"), self.api_key.encode("utf-8")
            ):
                raise AuthError("Invalid API key")
        except AuthError as e:
            self.logger.warning(f"Отказ в доступе: {e}")
            raise HTTPException(status_code=401, detail="Unauthorized")
        return True

    def _to_http_exception(self, error: Exception, action: str) -> HTTPException:
        """Преобразует ошибку сервиса в HTTP ответ без внутренних деталей"""
        if isinstance(error, ValidationError):
            self.logger.warning(f"Ошибка валидации ({action}): {error}")
            return HTTPException(status_code=400, detail=str(error))
        if isinstance(error, CertificateNotFoundError):
            return HTTPException(status_code=404, detail="Certificate not found")
        if isinstance(error, RestrictedCertificateError):
            return HTTPException(status_code=403, detail="Certificate is not available")
        if isinstance(error, ConflictError):
            self.logger.error(f"Конфликт идентификаторов ({action}): {error}")
            return HTTPException(status_code=409, detail="Certificate number conflict, please retry")

        self.logger.error(f"Ошибка ({action}): {error}")
        return HTTPException(status_code=500, detail=f"Failed to {action}")

    def _setup_exception_handlers(self):
        """Ошибки разбора запроса возвращаются как 400"""

        @self.app.exception_handler(RequestValidationError)
        async def request_validation_handler(request: Request, exc: RequestValidationError):
            errors = [
                f"{'.'.join(str(part) for part in error['loc'][1:])}: {error['msg']}"
                for error in exc.errors()
            ]
            self.logger.warning(f"Некорректный запрос {request.url.path}: {errors}")
            return JSONResponse(status_code=400, content={"detail": "Invalid request", "errors": errors})

    def _layout_for(self, certificate: Certificate) -> RenderedLayout:
        """Строит макет сертификата с QR-кодом публичной ссылки"""
        qr_code = self.qr_encoder.encode_data_uri(self.service.public_url(certificate))
        layout = self.renderer.render(certificate, qr_code=qr_code)
        if layout is None:
            raise RenderError(f"No template for certificate type {certificate.type}")
        return layout

    def _png_response(self, certificate: Certificate) -> Response:
        image = self.rasterizer.rasterize(self._layout_for(certificate))
        return Response(
            content=image,
            media_type="image/png",
            headers={"Content-Disposition": f'attachment; filename="{certificate.certificate_number}.png"'}
        )

    def _setup_routes(self):
        """Настройка маршрутов API"""

        @self.app.get("/api/certificates", response_model=CertificatePage)
        def list_certificates(
                page: int = Query(1, ge=1),
                limit: int = Query(10, ge=1),
                type: Optional[CertificateType] = Query(None),
                status: Optional[CertificateStatus] = Query(None),
                search: Optional[str] = Query(None),
                authorized: bool = Depends(self._verify_api_key)
        ):
            """Список сертификатов с фильтрами и пагинацией"""
            try:
                filters = CertificateFilter(page=page, limit=limit, type=type, status=status, search=search)
                return self.service.list_certificates(filters)
            except Exception as e:
                raise self._to_http_exception(e, "fetch certificates")

        @self.app.post("/api/certificates", response_model=Certificate, status_code=201)
        def create_certificate(
                request: CertificateRequest,
                authorized: bool = Depends(self._verify_api_key)
        ):
            """Создание нового сертификата"""
            try:
                return self.service.create_certificate(request)
            except Exception as e:
                raise self._to_http_exception(e, "create certificate")

        @self.app.get("/api/certificates/{certificate_id}", response_model=Certificate)
        def get_certificate(certificate_id: str):
            """Получение сертификата по ID"""
            try:
                return self.service.get_certificate(certificate_id)
            except Exception as e:
                raise self._to_http_exception(e, "fetch certificate")

        @self.app.put("/api/certificates/{certificate_id}", response_model=Certificate)
        def update_certificate(
                certificate_id: str,
                request: CertificateUpdate,
                authorized: bool = Depends(self._verify_api_key)
        ):
            """Редактирование сертификата"""
            try:
                return self.service.update_certificate(certificate_id, request)
            except Exception as e:
                raise self._to_http_exception(e, "update certificate")

        @self.app.patch("/api/certificates/{certificate_id}/status", response_model=Certificate)
        def set_certificate_status(
                certificate_id: str,
                request: StatusUpdateRequest,
                authorized: bool = Depends(self._verify_api_key)
        ):
            """Смена статуса сертификата"""
            try:
                return self.service.set_status(certificate_id, request.status)
            except Exception as e:
                raise self._to_http_exception(e, "update certificate status")

        @self.app.post("/api/certificates/{certificate_id}/toggle", response_model=Certificate)
        def toggle_certificate_status(
                certificate_id: str,
                authorized: bool = Depends(self._verify_api_key)
        ):
            """Приостановка или активация сертификата"""
            try:
                return self.service.toggle_status(certificate_id)
            except Exception as e:
                raise self._to_http_exception(e, "update certificate status")

        @self.app.delete("/api/certificates/{certificate_id}")
        def delete_certificate(
                certificate_id: str,
                authorized: bool = Depends(self._verify_api_key)
        ):
            """Удаление сертификата"""
            try:
                self.service.delete_certificate(certificate_id)
            except Exception as e:
                raise self._to_http_exception(e, "delete certificate")
            return {"success": True}

        @self.app.get("/api/certificates/{certificate_id}/layout", response_model=RenderedLayout)
        def certificate_layout(
                certificate_id: str,
                authorized: bool = Depends(self._verify_api_key)
        ):
            """Макет сертификата с координатами полей"""
            try:
                return self._layout_for(self.service.get_certificate(certificate_id))
            except Exception as e:
                raise self._to_http_exception(e, "render certificate")

        @self.app.get("/api/certificates/{certificate_id}/image")
        def certificate_image(
                certificate_id: str,
                authorized: bool = Depends(self._verify_api_key)
        ):
            """PNG сертификата для администратора"""
            try:
                return self._png_response(self.service.get_certificate(certificate_id))
            except Exception as e:
                raise self._to_http_exception(e, "render certificate")

        @self.app.get("/api/stats", response_model=CertificateStatistics)
        def certificate_statistics(authorized: bool = Depends(self._verify_api_key)):
            """Статистика для панели администратора"""
            try:
                return self.service.get_statistics()
            except Exception as e:
                raise self._to_http_exception(e, "fetch statistics")

        @self.app.get("/api/search", response_model=SearchResult)
        def search_certificates(q: Optional[str] = Query(None)):
            """Публичный поиск активного сертификата по названию или номеру"""
            try:
                return self.service.search_public(q)
            except Exception as e:
                raise self._to_http_exception(e, "search certificates")

        @self.app.get("/api/public/{slug}", response_model=PublicCertificateView)
        def public_certificate(slug: str):
            """Публичные данные сертификата по ссылке"""
            try:
                return self.service.view_public(slug)
            except Exception as e:
                raise self._to_http_exception(e, "fetch certificate")

        @self.app.get("/", response_class=HTMLResponse)
        def index_page(request: Request, q: Optional[str] = Query(None)):
            """Страница публичного поиска"""
            context = {"query": q or "", "result": None, "error": None}
            if q is not None:
                try:
                    context["result"] = self.service.search_public(q)
                except ValidationError as e:
                    context["error"] = str(e)
                except Exception as e:
                    self.logger.error(f"Ошибка публичного поиска: {e}")
                    context["error"] = "Search is temporarily unavailable"
            return self.templates.TemplateResponse(request, "index.html", context)

        @self.app.get("/certificate/{slug}", response_class=HTMLResponse)
        def certificate_page(request: Request, slug: str):
            """Публичная страница сертификата"""
            try:
                view = self.service.view_public(slug)
            except CertificateNotFoundError:
                return self.templates.TemplateResponse(request, "not_found.html", {}, status_code=404)
            except Exception as e:
                self.logger.error(f"Ошибка открытия сертификата {slug}: {e}")
                return self.templates.TemplateResponse(request, "not_found.html", {}, status_code=500)

            if view.restricted:
                return self.templates.TemplateResponse(request, "restricted.html", {"view": view})

            certificate = view.certificate
            context = {
                "certificate": certificate,
                "layout": self._layout_for(certificate),
                "public_url": self.service.public_url(certificate),
            }
            return self.templates.TemplateResponse(request, "certificate.html", context)

        @self.app.get("/certificate/{slug}/download")
        def certificate_download(slug: str):
            """Скачивание PNG сертификата по публичной ссылке"""
            try:
                return self._png_response(self.service.get_public_certificate(slug))
            except Exception as e:
                raise self._to_http_exception(e, "render certificate")
