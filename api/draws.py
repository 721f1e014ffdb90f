"""
Draw API Endpoints

職責：
1. 參與者抽籤（每個 IPv4 只能抽一次）
2. 查詢參與者的抽籤狀態
"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from models import DrawOutcome
from schemas import DrawResponse, StatusResponse
from core.draw_manager import DrawService
from api.deps import get_client_address, get_draw_service

router = APIRouter(tags=["draws"])
logger = logging.getLogger(__name__)

INVALID_IDENTITY_DETAIL = "IPv4 address required"


@router.get("/draw", response_model=DrawResponse)
def draw(
    address: str = Depends(get_client_address),
    service: DrawService = Depends(get_draw_service)
):
    """
    抽一支籤（參與者 endpoint）

    回應：
    - 200：抽到的籤與剩餘數量
    - 200：籤已抽完時 concept 為 null
    - 403：此位址已經抽過
    - 400：無法取得 IPv4 位址
    """
    try:
        result = service.draw(address)
    except Exception as e:
        logger.error(f"Failed to draw: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")

    if result.outcome == DrawOutcome.INVALID:
        raise HTTPException(status_code=400, detail=INVALID_IDENTITY_DETAIL)

    if result.outcome == DrawOutcome.ALREADY_DRAWN:
        raise HTTPException(
            status_code=403,
            detail={
                "error": "You have already drawn a concept",
                "remaining": result.remaining,
            }
        )

    return DrawResponse.from_result(result)


@router.get("/status", response_model=StatusResponse)
def status(
    address: str = Depends(get_client_address),
    service: DrawService = Depends(get_draw_service)
):
    """
    查詢抽籤狀態（唯讀）

    返回：
        - drawn=true：已抽到的籤
        - drawn=false：目前剩餘數量
    """
    try:
        result = service.status(address)
    except Exception as e:
        logger.error(f"Failed to get status: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")

    if not result.valid:
        raise HTTPException(status_code=400, detail=INVALID_IDENTITY_DETAIL)

    return StatusResponse.from_result(result)
