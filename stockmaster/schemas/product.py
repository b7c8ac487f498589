from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Literal, Optional

from stockmaster.models.product import Categoria, UnidadMedida


class ProductBase(BaseModel):
    """
    Esquema base para productos.
    - `sku`: solo letras mayúsculas, números y guiones.
    - `nivel_reorden`: por debajo de este total el producto se marca como stock bajo.
    """

    sku: str = Field(..., min_length=3, max_length=30, pattern="^[A-Z0-9-]+$")
    nombre: str = Field(..., min_length=1, max_length=100)
    descripcion: Optional[str] = Field(None, max_length=500)
    categoria: Categoria
    unidad_medida: UnidadMedida
    nivel_reorden: int = Field(0, ge=0)


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    """Actualización parcial: solo se modifican los campos enviados."""

    sku: Optional[str] = Field(None, min_length=3, max_length=30, pattern="^[A-Z0-9-]+$")
    nombre: Optional[str] = Field(None, min_length=1, max_length=100)
    descripcion: Optional[str] = Field(None, max_length=500)
    categoria: Optional[Categoria] = None
    unidad_medida: Optional[UnidadMedida] = None
    nivel_reorden: Optional[int] = Field(None, ge=0)


class ProductResponse(ProductBase):
    id: int
    creado_en: datetime
    actualizado_en: datetime

    class Config:
        from_attributes = True


class StockPorAlmacen(BaseModel):
    id_almacen: int
    nombre_almacen: str
    cantidad: int


class ProductDetailResponse(ProductResponse):
    """Producto con su stock total, el desglose por almacén y su nivel de stock."""

    stock_total: int
    nivel_stock: Literal["sin_stock", "bajo", "ok"]
    stock_por_almacen: List[StockPorAlmacen] = []


class PaginatedProductResponse(BaseModel):
    data: List[ProductResponse]
    total: int
    limit: int
    offset: int
