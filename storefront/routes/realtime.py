# storefront/routes/realtime.py
import asyncio
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.order import Order
from storefront.models.users import Profile
from storefront.schemas.order import OrderSummary
from storefront.utils.realtime import OrderBoard, order_feed
from storefront.utils.tokenJWT import SESSION_COOKIE, decode_session

router = APIRouter(tags=["Realtime"])
logger = logging.getLogger(__name__)


def _load_board(db: Session, email: Optional[str]) -> Optional[OrderBoard]:
    """Return the order board for an admin session, None for anyone else."""
    if email is None:
        return None
    try:
        profile = db.query(Profile).filter(Profile.email == email).first()
        if profile is None or profile.role != "admin":
            return None
        orders = db.query(Order).order_by(Order.created_at.desc(), Order.id.desc()).all()
        return OrderBoard(OrderSummary.model_validate(o).model_dump(mode="json") for o in orders)
    finally:
        # Release the connection, the socket may stay open for a long time
        db.close()


# Live order status updates for the admin dashboard
@router.websocket("/realtime/orders")
async def order_updates(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    email = decode_session(token or websocket.cookies.get(SESSION_COOKIE))
    board = _load_board(db, email)
    if board is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    # Status writes run in worker threads, hand events over to this loop
    def _on_event(event: dict):
        loop.call_soon_threadsafe(queue.put_nowait, event)

    async def _push():
        while True:
            event = await queue.get()
            merged = board.apply(event)
            if merged is not None:
                await websocket.send_json({"type": "update", "order": merged})

    async def _drain():
        # Returns once the client goes away
        while True:
            await websocket.receive_text()

    with order_feed.subscribe(_on_event):
        await websocket.send_json({"type": "snapshot", "orders": board.orders()})
        tasks = {asyncio.create_task(_push()), asyncio.create_task(_drain())}
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                raise exc
    logger.info("Order updates client disconnected")
