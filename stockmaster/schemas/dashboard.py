from datetime import datetime
from pydantic import BaseModel
from typing import Literal, Optional


class DashboardKPIs(BaseModel):
    total_productos: int
    stock_bajo: int
    sin_stock: int
    recepciones_pendientes: int
    entregas_pendientes: int
    transferencias_programadas: int


class Notificacion(BaseModel):
    id: str
    tipo: Literal[
        "out_of_stock",
        "low_stock",
        "pending_receipt",
        "pending_delivery",
        "pending_transfer",
    ]
    titulo: str
    mensaje: str
    severidad: Literal["error", "warning", "info"]
    fecha: datetime
    id_producto: Optional[int] = None
    id_documento: Optional[int] = None
