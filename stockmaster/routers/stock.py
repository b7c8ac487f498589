from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session, func, select
from sqlalchemy.exc import SQLAlchemyError

from stockmaster.models.database import get_db
from stockmaster.models.product import Product
from stockmaster.models.stock import Stock
from stockmaster.models.user import User
from stockmaster.models.warehouse import Warehouse
from stockmaster.routers.auth import get_current_user
from stockmaster.schemas.stock import (
    PaginatedStockResponse,
    StockCantidadResponse,
    StockTotalResponse,
)
from stockmaster.services.stock import get_stock, nivel_stock, stock_total

router = APIRouter(prefix="/stock", tags=["Stock"])


@router.get("/", response_model=PaginatedStockResponse)
def get_all_stock(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limit: int = Query(10, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    id_almacen: Optional[int] = Query(None),
    id_producto: Optional[int] = Query(None),
):
    """Lista el stock por producto y almacén. Las filas a 0 también aparecen."""
    try:
        statement = (
            select(
                Stock.id_producto,
                Product.sku,
                Product.nombre.label("nombre_producto"),
                Stock.id_almacen,
                Warehouse.nombre.label("nombre_almacen"),
                Stock.cantidad,
            )
            .join(Product, Product.id == Stock.id_producto)
            .join(Warehouse, Warehouse.id == Stock.id_almacen)
        )
        if id_almacen is not None:
            statement = statement.where(Stock.id_almacen == id_almacen)
        if id_producto is not None:
            statement = statement.where(Stock.id_producto == id_producto)

        stock = db.exec(
            statement.order_by(Stock.id_almacen, Stock.id_producto)
            .limit(limit)
            .offset(offset)
        ).all()
        total_records = db.exec(
            select(func.count()).select_from(statement.subquery())
        ).first()

    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error de conexión con la base de datos",
        )
    return PaginatedStockResponse(
        data=[dict(row._mapping) for row in stock],
        total=total_records or 0,
        limit=limit,
        offset=offset,
    )


@router.get("/producto/{id_producto}", response_model=StockTotalResponse)
def get_stock_total(
    id_producto: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    id_almacen: Optional[int] = Query(None),
):
    """Stock total del producto (en todos los almacenes o en uno) y su nivel."""
    try:
        product = db.get(Product, id_producto)
        if product:
            total = stock_total(db, id_producto, id_almacen)
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error de conexión con la base de datos",
        )
    if not product:
        raise HTTPException(status_code=404, detail="Producto no encontrado")

    return StockTotalResponse(
        id_producto=id_producto,
        stock_total=total,
        nivel_reorden=product.nivel_reorden,
        nivel_stock=nivel_stock(total, product.nivel_reorden),
    )


@router.get(
    "/producto/{id_producto}/almacen/{id_almacen}",
    response_model=StockCantidadResponse,
)
def get_stock_quantity(
    id_producto: int,
    id_almacen: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Cantidad de un producto en un almacén (0 si nunca ha tenido stock)."""
    try:
        cantidad = get_stock(db, id_producto, id_almacen)
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error de conexión con la base de datos",
        )
    return StockCantidadResponse(
        id_producto=id_producto, id_almacen=id_almacen, cantidad=cantidad
    )
