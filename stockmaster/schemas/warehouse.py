from typing import List, Optional
from pydantic import BaseModel, Field


class WarehouseBase(BaseModel):
    """Esquema base con los campos comunes de un almacén."""

    codigo: str = Field(..., min_length=1, max_length=20, description="Código único del almacén")
    nombre: str = Field(..., min_length=1, max_length=255)
    direccion: str = Field("", max_length=500)


class WarehouseCreate(WarehouseBase):
    """El código se guarda sin espacios y se compara sin distinguir mayúsculas."""

    pass


class WarehouseUpdate(BaseModel):
    """Solo se pueden cambiar el nombre y la dirección; el código es fijo."""

    nombre: Optional[str] = Field(None, min_length=1, max_length=255)
    direccion: Optional[str] = Field(None, max_length=500)


class WarehouseResponse(WarehouseBase):
    id: int

    class Config:
        from_attributes = True


class PaginatedWarehouseResponse(BaseModel):
    data: List[WarehouseResponse]
    total: int
    limit: int
    offset: int


class LocationCreate(BaseModel):
    """Alta de una estantería, sección o ubicación."""

    nombre: str = Field(..., min_length=1, max_length=100)


class BinResponse(BaseModel):
    id: int
    id_seccion: int
    nombre: str

    class Config:
        from_attributes = True


class SectionResponse(BaseModel):
    id: int
    id_estanteria: int
    nombre: str
    ubicaciones: List[BinResponse] = []

    class Config:
        from_attributes = True


class RackResponse(BaseModel):
    id: int
    id_almacen: int
    nombre: str
    secciones: List[SectionResponse] = []

    class Config:
        from_attributes = True


class WarehouseTreeResponse(WarehouseResponse):
    """Almacén con su árbol Estantería → Sección → Ubicación."""

    estanterias: List[RackResponse] = []
