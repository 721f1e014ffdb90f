from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Optional
import logging
import time

from config import Settings, configure_logging, get_settings
from core.draw_manager import DrawService, SandboxDrawer
from core.notifier import NotificationHub
from services.category_service import (
    DEFAULT_CATEGORY_TABLE,
    build_catalog,
    load_category_table,
)
from services.qr_service import generate_server_qr, generate_wifi_qr
from api import draws, monitor, qr, sandbox

logger = logging.getLogger(__name__)


def build_services(settings: Settings):
    """
    建立整個 process 共用的 DrawService 與測試用的 SandboxDrawer

    兩者使用同一份類別表，但籤池彼此獨立
    """
    if settings.categories_file:
        table = load_category_table(settings.categories_file)
    else:
        table = DEFAULT_CATEGORY_TABLE

    categories, concepts = build_catalog(table)
    hub = NotificationHub(queue_size=settings.monitor_queue_size)
    service = DrawService(categories, concepts, hub=hub)
    logger.info(
        f"Draw service ready with {service.total_concepts} concepts "
        f"in {len(categories)} categories"
    )
    return service, SandboxDrawer(concepts)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: 產生 QR code 圖檔
        generate_server_qr(settings)
        generate_wifi_qr(settings)
        logger.info(f"Server is running at {settings.server_url}")
        logger.info(f"Monitor feed available at {settings.server_url}/api/monitor and /ws/monitor")
        yield

    app = FastAPI(
        title="Concept Draw API",
        description="Draw exactly one concept per participant with a live monitor feed",
        version="1.0.0",
        lifespan=lifespan
    )

    service, sandbox_drawer = build_services(settings)
    app.state.settings = settings
    app.state.draw_service = service
    app.state.sandbox = sandbox_drawer

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure this properly in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        remote = request.client.host if request.client else "-"
        logger.info(
            f"{remote} - {request.method} {request.url.path} "
            f"{response.status_code} {elapsed_ms:.3f} ms"
        )
        return response

    # Include routers
    app.include_router(draws.router)
    app.include_router(monitor.router)
    app.include_router(qr.router)
    if settings.enable_test_routes:
        app.include_router(sandbox.router)

    @app.get("/")
    def root():
        return {"message": "Concept Draw API", "status": "ok"}

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
