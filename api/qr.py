"""
QR code Endpoints

圖檔在啟動時由 qr_service 產生，這裡只負責回傳
"""
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from config import Settings
from services.qr_service import SERVER_QR_FILENAME, WIFI_QR_FILENAME
from api.deps import get_app_settings

router = APIRouter(tags=["qr"])


@router.get("/qr")
def get_server_qr(settings: Settings = Depends(get_app_settings)):
    path = Path(settings.static_dir) / SERVER_QR_FILENAME
    if not path.is_file():
        raise HTTPException(status_code=404, detail="QR code not available")
    return FileResponse(path, media_type="image/png")


@router.get("/wifi")
def get_wifi_qr(settings: Settings = Depends(get_app_settings)):
    path = Path(settings.static_dir) / WIFI_QR_FILENAME
    if not settings.wifi_configured or not path.is_file():
        raise HTTPException(status_code=404, detail="WiFi configuration not available")
    return FileResponse(path, media_type="image/png")
