from datetime import datetime
from enum import Enum
from typing import Optional
from sqlalchemy import event
from sqlmodel import SQLModel, Field

from stockmaster.exceptions import LedgerInmutable


class TipoMovimiento(str, Enum):
    RECEIPT = "Receipt"
    DELIVERY = "Delivery"
    TRANSFER_IN = "Transfer In"
    TRANSFER_OUT = "Transfer Out"
    ADJUSTMENT = "Adjustment"


class Movement(SQLModel, table=True):
    """Entrada del libro de movimientos de stock. Solo se insertan, nunca se modifican."""

    __tablename__ = "movimiento_stock"

    id: int = Field(default=None, primary_key=True, nullable=False)
    id_producto: int = Field(foreign_key="producto.id", nullable=False, index=True)
    id_almacen: int = Field(foreign_key="almacen.id", nullable=False, index=True)
    tipo_movimiento: str = Field(nullable=False)
    tipo_documento: str = Field(nullable=False)
    id_documento: int = Field(foreign_key="documento.id", nullable=False, index=True)
    numero_documento: str = Field(nullable=False)
    cantidad: int = Field(nullable=False)  # Con signo: + entra, - sale
    stock_anterior: int = Field(nullable=False, ge=0)
    stock_nuevo: int = Field(nullable=False, ge=0)
    fecha: datetime = Field(default_factory=lambda: datetime.now(), index=True)
    id_usuario: int = Field(foreign_key="usuario.id", nullable=False)
    notas: Optional[str] = Field(default=None)


@event.listens_for(Movement, "before_update")
def _impedir_modificacion(mapper, connection, target):
    raise LedgerInmutable(
        f"El movimiento {target.id} es inmutable y no se puede modificar."
    )


@event.listens_for(Movement, "before_delete")
def _impedir_borrado(mapper, connection, target):
    raise LedgerInmutable(
        f"El movimiento {target.id} es inmutable y no se puede eliminar."
    )
