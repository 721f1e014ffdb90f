from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    # JSON 類別表，未設定時使用內建的預設類別表
    categories_file: Optional[str] = None

    # 在 reverse proxy 後面時，改用 X-Forwarded-For 的第一個位址
    trust_proxy_headers: bool = False

    enable_test_routes: bool = True
    monitor_queue_size: int = 1000

    # QR code 圖檔輸出位置
    static_dir: str = "./public"
    public_url: Optional[str] = None

    wifi_ssid: Optional[str] = None
    wifi_password: Optional[str] = None
    wifi_encryption: str = "WPA"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CONCEPT_DRAW_")

    @property
    def server_url(self) -> str:
        return self.public_url or f"http://{self.host}:{self.port}"

    @property
    def wifi_configured(self) -> bool:
        return bool(self.wifi_ssid and self.wifi_password)


@lru_cache()
def get_settings():
    return Settings()


def configure_logging(settings: Settings) -> None:
    """
    設定 root logger

    所有模組都用 logging.getLogger(__name__)，只在建立 app 時設定一次
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )
    logger.debug(f"Logging configured at {logging.getLevelName(level)}")
