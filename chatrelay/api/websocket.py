import anyio
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from chatrelay.core.log_config import logger
from chatrelay.dependencies.service_dependencies import get_event_gateway
from chatrelay.services.event_gateway import EventGateway

router = APIRouter(prefix="/ws", tags=["websocket"])


@router.websocket("")
async def websocket_endpoint(
    websocket: WebSocket,
    gateway: EventGateway = Depends(get_event_gateway),
):
    connection_id = None

    try:
        connection_id = await gateway.connect(websocket)

        # Frames from one connection are handled strictly in arrival order.
        while True:
            data = await websocket.receive_text()
            logger.debug(f"Data received from {connection_id}: {data}")
            await gateway.dispatch(connection_id, data)

    except WebSocketDisconnect as e:
        logger.info(f"Connection {connection_id} disconnected. Code: {e.code}, Reason: {e.reason}")

    except Exception as e:
        logger.error(f"An unhandled error occurred in websocket {connection_id}: {e}", exc_info=True)

    finally:
        if connection_id is not None:
            # The handler may be cancelled; the departure must still go out.
            with anyio.CancelScope(shield=True):
                await gateway.disconnect(connection_id)
