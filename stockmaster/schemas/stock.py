from typing import List, Literal
from pydantic import BaseModel, Field


class StockResponse(BaseModel):
    """Cantidad de un producto en un almacén."""

    id_producto: int
    sku: str
    nombre_producto: str
    id_almacen: int
    nombre_almacen: str
    cantidad: int = Field(..., ge=0)


class PaginatedStockResponse(BaseModel):
    data: List[StockResponse]
    total: int
    limit: int
    offset: int


class StockTotalResponse(BaseModel):
    """Stock total de un producto sumando todos los almacenes."""

    id_producto: int
    stock_total: int = Field(..., ge=0)
    nivel_reorden: int
    nivel_stock: Literal["sin_stock", "bajo", "ok"]


class StockCantidadResponse(BaseModel):
    id_producto: int
    id_almacen: int
    cantidad: int = Field(..., ge=0)
