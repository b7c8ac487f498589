from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Literal, Optional

from stockmaster.models.document import EstadoDocumento, TipoAjuste, TipoDocumento


class DocumentLineCreate(BaseModel):
    """Línea de recepción, entrega o transferencia.
    Las líneas sin producto o con cantidad 0 se descartan al crear el documento."""

    id_producto: Optional[int] = Field(None, description="Producto de la línea")
    cantidad: int = Field(0, ge=0, description="Cantidad solicitada")
    notas: Optional[str] = Field(None, max_length=500)


class AdjustmentLineCreate(BaseModel):
    """Línea de ajuste: la diferencia (física - registrada) es lo que se aplica al stock."""

    id_producto: Optional[int] = None
    cantidad_registrada: int = Field(0, ge=0)
    cantidad_fisica: int = Field(0, ge=0)
    notas: Optional[str] = Field(None, max_length=500)


class ReceiptCreate(BaseModel):
    proveedor: str = Field(..., min_length=1, max_length=255)
    contacto: Optional[str] = Field(None, max_length=255)
    id_almacen: int
    notas: Optional[str] = None
    lineas: List[DocumentLineCreate] = Field(..., max_length=100)


class DeliveryCreate(BaseModel):
    cliente: str = Field(..., min_length=1, max_length=255)
    contacto: Optional[str] = Field(None, max_length=255)
    id_almacen: int
    notas: Optional[str] = None
    lineas: List[DocumentLineCreate] = Field(..., max_length=100)


class TransferCreate(BaseModel):
    id_almacen_origen: int
    id_almacen_destino: int
    notas: Optional[str] = None
    lineas: List[DocumentLineCreate] = Field(..., max_length=100)


class AdjustmentCreate(BaseModel):
    id_almacen: int
    tipo_ajuste: TipoAjuste = TipoAjuste.PHYSICAL_COUNT
    notas: Optional[str] = None
    lineas: List[AdjustmentLineCreate] = Field(..., max_length=100)


class DocumentLineResponse(BaseModel):
    id_linea: int
    id_producto: int
    cantidad: int
    cantidad_registrada: Optional[int] = None
    cantidad_fisica: Optional[int] = None
    diferencia: Optional[int] = None
    notas: Optional[str] = None

    class Config:
        from_attributes = True


class DocumentResponse(BaseModel):
    """Documento con sus líneas. En transferencias `id_almacen` es el origen."""

    id: int
    numero: str
    tipo: TipoDocumento
    estado: EstadoDocumento
    id_almacen: int
    id_almacen_destino: Optional[int] = None
    contraparte: Optional[str] = None
    contacto: Optional[str] = None
    tipo_ajuste: Optional[TipoAjuste] = None
    notas: Optional[str] = None
    creado_en: datetime
    validado_en: Optional[datetime] = None
    id_usuario: int
    lineas: List[DocumentLineResponse] = []

    class Config:
        from_attributes = True


class PaginatedDocumentResponse(BaseModel):
    data: List[DocumentResponse]
    total: int
    limit: int
    offset: int


class DocumentStatusUpdate(BaseModel):
    """Cambio manual de estado. `Done` solo se alcanza validando el documento."""

    estado: Literal["Waiting", "Ready", "Canceled"]
