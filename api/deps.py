"""
FastAPI dependencies

DrawService 在 create_app() 時建立一次，存在 app.state，透過這裡注入 endpoint
"""
from fastapi import Request

from config import Settings
from core.draw_manager import DrawService, SandboxDrawer


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_draw_service(request: Request) -> DrawService:
    return request.app.state.draw_service


def get_sandbox(request: Request) -> SandboxDrawer:
    return request.app.state.sandbox


def get_client_address(request: Request) -> str:
    """
    取得請求的原始位址（尚未標準化，交給 Identity Resolver 處理）

    trust_proxy_headers 開啟時使用 X-Forwarded-For 的第一個位址
    """
    settings: Settings = request.app.state.settings
    if settings.trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()

    if request.client is None:
        return ""
    return request.client.host
