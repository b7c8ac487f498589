from datetime import datetime
from pydantic import BaseModel
from typing import List, Optional

from stockmaster.models.movement import TipoMovimiento


class MovementResponse(BaseModel):
    """Entrada del libro de movimientos. `cantidad` lleva signo."""

    id: int
    id_producto: int
    id_almacen: int
    tipo_movimiento: TipoMovimiento
    tipo_documento: str
    id_documento: int
    numero_documento: str
    cantidad: int
    stock_anterior: int
    stock_nuevo: int
    fecha: datetime
    id_usuario: int
    notas: Optional[str] = None

    class Config:
        from_attributes = True


class PaginatedMovementsResponse(BaseModel):
    data: List[MovementResponse]
    total: int
    limit: int
    offset: int
