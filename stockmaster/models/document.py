from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field


class TipoDocumento(str, Enum):
    RECEIPT = "Receipt"
    DELIVERY = "Delivery"
    INTERNAL = "Internal"
    ADJUSTMENT = "Adjustment"


class EstadoDocumento(str, Enum):
    DRAFT = "Draft"
    WAITING = "Waiting"
    READY = "Ready"
    DONE = "Done"
    CANCELED = "Canceled"


class TipoAjuste(str, Enum):
    PHYSICAL_COUNT = "Physical Count"
    DAMAGE = "Damage"
    LOSS = "Loss"
    OTHER = "Other"


# Prefijo del número de documento según el tipo
PREFIJOS = {
    TipoDocumento.RECEIPT: "REC",
    TipoDocumento.DELIVERY: "DEL",
    TipoDocumento.INTERNAL: "TRF",
    TipoDocumento.ADJUSTMENT: "ADJ",
}


class Document(SQLModel, table=True):
    """Recepción, entrega, transferencia interna o ajuste de stock."""

    __tablename__ = "documento"

    id: int = Field(default=None, primary_key=True, nullable=False)
    numero: str = Field(unique=True, index=True, nullable=False, max_length=20)
    tipo: str = Field(nullable=False, index=True)  # la restricción la pone el esquema
    estado: str = Field(default=EstadoDocumento.DRAFT.value, nullable=False, index=True)
    # Almacén de la recepción/entrega/ajuste, o almacén de origen de la transferencia
    id_almacen: int = Field(foreign_key="almacen.id", nullable=False)
    id_almacen_destino: Optional[int] = Field(default=None, foreign_key="almacen.id")
    contraparte: Optional[str] = Field(default=None, max_length=255)  # proveedor o cliente
    contacto: Optional[str] = Field(default=None, max_length=255)
    tipo_ajuste: Optional[str] = Field(default=None)
    notas: Optional[str] = Field(default=None)
    creado_en: datetime = Field(default_factory=lambda: datetime.now())
    validado_en: Optional[datetime] = Field(default=None)
    id_usuario: int = Field(foreign_key="usuario.id", nullable=False)


class DocumentLine(SQLModel, table=True):
    __tablename__ = "documento_linea"

    id_documento: int = Field(foreign_key="documento.id", primary_key=True)
    id_linea: int = Field(primary_key=True, ge=1)
    id_producto: int = Field(foreign_key="producto.id", nullable=False)
    cantidad: int = Field(nullable=False, ge=1)  # En ajustes: |diferencia|
    # Solo ajustes
    cantidad_registrada: Optional[int] = Field(default=None, ge=0)
    cantidad_fisica: Optional[int] = Field(default=None, ge=0)
    diferencia: Optional[int] = Field(default=None)  # fisica - registrada
    notas: Optional[str] = Field(default=None)
