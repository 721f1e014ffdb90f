"""
Monitor API Endpoints

職責：
1. 提供完整快照（GET /api/monitor）
2. WebSocket 即時推播（/ws/monitor）

WebSocket 協定：
- 連線後第一則訊息：{"event": "initialData", "data": <snapshot>}
- 之後每筆抽籤：{"event": "participantDraw", "data": <entry + remaining>}
- 斷線後不補送（at-most-once）
"""
import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool

from schemas import MonitorResponse
from core.draw_manager import DrawService
from core.notifier import Subscription
from api.deps import get_draw_service

router = APIRouter(tags=["monitor"])
logger = logging.getLogger(__name__)

INITIAL_DATA_EVENT = "initialData"


@router.get("/api/monitor", response_model=MonitorResponse)
def get_monitor_data(service: DrawService = Depends(get_draw_service)):
    """取得所有參與者與統計資料"""
    try:
        return MonitorResponse.from_snapshot(service.snapshot())
    except Exception as e:
        logger.error(f"Failed to build monitor snapshot: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


async def _forward_events(websocket: WebSocket, subscription: Subscription) -> None:
    """把訂閱的事件依序送給監控端；任何傳送失敗都只結束這個連線"""
    try:
        while True:
            event = await subscription.next_event()
            if event is None:
                await websocket.close(code=1013, reason="Monitor stream overflow")
                return
            await websocket.send_json(event)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.debug(f"Monitor client {subscription.id} send failed: {e}")


@router.websocket("/ws/monitor")
async def monitor_socket(websocket: WebSocket):
    """
    監控端 WebSocket

    流程：
    1. 接受連線
    2. 在同一把鎖內取得快照並訂閱（不會漏掉也不會重複事件）
    3. 送出快照
    4. 背景轉送事件，前景等待斷線
    """
    service: DrawService = websocket.app.state.draw_service

    await websocket.accept()
    # 取得鎖會阻塞，放到 thread pool 執行，避免卡住同一個 event loop 上的其他連線
    loop = asyncio.get_running_loop()
    snapshot, subscription = await run_in_threadpool(service.subscribe, loop)
    logger.info(f"Monitor client connected: {subscription.id}")

    sender = None
    try:
        await websocket.send_json({"event": INITIAL_DATA_EVENT, "data": snapshot.to_payload()})
        sender = asyncio.create_task(_forward_events(websocket, subscription))
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        if sender is not None:
            sender.cancel()
        service.unsubscribe(subscription)
        logger.info(f"Monitor client disconnected: {subscription.id}")
