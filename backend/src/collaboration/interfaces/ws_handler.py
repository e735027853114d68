import asyncio
import logging
from uuid import UUID

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from redis.exceptions import RedisError

from collaboration.application.services import presence
from collaboration.infrastructure.redis_pubsub import subscribe
from documents.infrastructure.document_repository import DbDocumentRepository
from identity.application.services import verify_token
from shared.exceptions import AuthenticationError
from shared.infrastructure.database import async_session
from shared.infrastructure.redis import get_redis_pool

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/documents/{document_id}")
async def document_events(websocket: WebSocket, document_id: UUID):
    """Stream a document's events to one client.

    The feed is read-only: edits, locks and comments go through the REST API,
    which publishes them here.
    """
    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=4001, reason="Missing token")
        return

    try:
        user_id = verify_token(token)
    except AuthenticationError:
        await websocket.close(code=4001, reason="Invalid token")
        return

    async with async_session() as db:
        if not await DbDocumentRepository(db).get_by_id(document_id):
            await websocket.close(code=4004, reason="Document not found")
            return

    await websocket.accept()

    async def forward(data: bytes):
        await websocket.send_text(data.decode() if isinstance(data, bytes) else data)

    sub_task = None
    presence.join(document_id, user_id)
    logger.info("User %s joined real-time session for document %s", user_id, document_id)
    try:
        sub_task = await subscribe(get_redis_pool(), document_id, forward)
        # Client messages carry no edits; receiving only detects disconnects.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    except RedisError:
        logger.warning("Event feed unavailable for document %s", document_id, exc_info=True)
        await websocket.close(code=1011, reason="Event feed unavailable")
    finally:
        presence.leave(document_id, user_id)
        if sub_task is not None:
            sub_task.cancel()
            try:
                await sub_task
            except asyncio.CancelledError:
                pass
        logger.info("User %s left real-time session for document %s", user_id, document_id)
