"""
QR code 服務：啟動時產生伺服器網址與 Wi-Fi 的 QR code 圖檔

失敗只記錄，不影響服務啟動
"""
from pathlib import Path
from typing import Optional
import logging

import qrcode

from config import Settings

logger = logging.getLogger(__name__)

SERVER_QR_FILENAME = "qr.png"
WIFI_QR_FILENAME = "wifi.png"


def _escape_wifi_field(value: str) -> str:
    # Wi-Fi QR 格式中 \ ; , : " 需要跳脫
    for char in ('\\', ';', ',', ':', '"'):
        value = value.replace(char, f"\\{char}")
    return value


def build_wifi_payload(ssid: str, password: str, encryption: str = "WPA") -> str:
    """
    組出 Wi-Fi QR code 的字串

    格式：WIFI:T:<encryption>;S:<ssid>;P:<password>;;
    """
    return (
        f"WIFI:T:{encryption};"
        f"S:{_escape_wifi_field(ssid)};"
        f"P:{_escape_wifi_field(password)};;"
    )


def render_qr(data: str, target: Path) -> Path:
    """把 data 編碼成 QR code PNG 寫到 target"""
    qr = qrcode.QRCode(border=2, box_size=10)
    qr.add_data(data)
    qr.make(fit=True)
    image = qr.make_image(fill_color="#000000", back_color="#ffffff")

    target.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(target))
    return target


def generate_server_qr(settings: Settings) -> Optional[Path]:
    target = Path(settings.static_dir) / SERVER_QR_FILENAME
    try:
        render_qr(settings.server_url, target)
    except Exception as e:
        logger.error(f"Failed to generate QR code: {e}", exc_info=True)
        return None
    logger.info(f"QR Code generated for {settings.server_url}/qr")
    return target


def generate_wifi_qr(settings: Settings) -> Optional[Path]:
    if not settings.wifi_configured:
        logger.warning("WiFi QR Code generation skipped: missing wifi_ssid or wifi_password")
        return None

    payload = build_wifi_payload(
        settings.wifi_ssid, settings.wifi_password, settings.wifi_encryption
    )
    target = Path(settings.static_dir) / WIFI_QR_FILENAME
    try:
        render_qr(payload, target)
    except Exception as e:
        logger.error(f"Failed to generate WiFi QR code: {e}", exc_info=True)
        return None
    logger.info(f"WiFi QR Code generated for {settings.server_url}/wifi")
    return target
