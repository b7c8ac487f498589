import json
import logging
from typing import List

import anyio
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

router = APIRouter()


class ConnectionManager:
    """Guarda las conexiones activas del canal de movimientos.
    Cada cliente que se conecta al WebSocket se añade a la lista."""

    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        await websocket.accept()  # .accept() es obligatorio para establecer la conexión.
        self.active_connections.append(websocket)

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

    async def broadcast(self, message: str):
        """Envía un mensaje de texto a todos los clientes conectados."""
        for connection in list(self.active_connections):
            await connection.send_text(message)


# Instancia compartida por toda la aplicación
manager = ConnectionManager()


def notificar_movimientos(documento, movimientos) -> None:
    """Avisa a los clientes de que un documento se ha validado.

    Las rutas son síncronas (threadpool), así que el broadcast se lanza en el
    event loop con AnyIO. Un fallo aquí no afecta a la validación ya confirmada.
    """
    if not manager.active_connections:
        return

    mensaje = json.dumps(
        {
            "evento": "documento_validado",
            "id_documento": documento.id,
            "numero": documento.numero,
            "tipo": documento.tipo,
            "movimientos": [
                {
                    "id": m.id,
                    "id_producto": m.id_producto,
                    "id_almacen": m.id_almacen,
                    "tipo_movimiento": m.tipo_movimiento,
                    "cantidad": m.cantidad,
                    "stock_nuevo": m.stock_nuevo,
                }
                for m in movimientos
            ],
        }
    )

    try:
        anyio.from_thread.run(manager.broadcast, mensaje)
    except Exception:
        logger.warning(
            "No se pudo emitir por WebSocket la validación de %s",
            documento.numero,
            exc_info=True,
        )


@router.websocket("/ws/movimientos")
async def websocket_endpoint(websocket: WebSocket):
    await manager.connect(websocket)

    try:
        # Mantenemos la conexión viva hasta que el cliente se desconecte.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        # Sin conexiones zombis
        manager.disconnect(websocket)
