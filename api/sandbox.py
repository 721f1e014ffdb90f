"""
Sandbox API Endpoints（測試用）

不檢查是否抽過、不寫入 Ledger、不推播，
而且使用獨立的籤池，不會影響正式抽籤
"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from models import DrawOutcome
from schemas import DrawResponse, SandboxResetResponse
from core.draw_manager import SandboxDrawer
from api.deps import get_client_address, get_sandbox
from api.draws import INVALID_IDENTITY_DETAIL

router = APIRouter(prefix="/test", tags=["sandbox"])
logger = logging.getLogger(__name__)


@router.get("/draw", response_model=DrawResponse)
def sandbox_draw(
    address: str = Depends(get_client_address),
    sandbox: SandboxDrawer = Depends(get_sandbox)
):
    result = sandbox.draw(address)
    if result.outcome == DrawOutcome.INVALID:
        raise HTTPException(status_code=400, detail=INVALID_IDENTITY_DETAIL)
    return DrawResponse.from_result(result)


@router.post("/reset", response_model=SandboxResetResponse)
def sandbox_reset(sandbox: SandboxDrawer = Depends(get_sandbox)):
    return SandboxResetResponse(remaining=sandbox.reset())
