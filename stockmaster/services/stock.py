"""
Saldos de stock por (producto, almacén).

La cantidad nunca puede quedar en negativo: `aplicar_delta` comprueba antes
de modificar nada y lanza `StockInsuficiente` si no hay unidades suficientes.
Las funciones solo hacen `flush`; el commit lo decide quien las llama.
"""
import logging
from typing import Optional

from sqlmodel import Session, func, select

from stockmaster.exceptions import StockInsuficiente
from stockmaster.models.stock import Stock
from stockmaster.models.warehouse import Warehouse

logger = logging.getLogger(__name__)


def get_stock(db: Session, id_producto: int, id_almacen: int) -> int:
    """Cantidad del producto en el almacén (0 si no hay fila)."""
    stock = db.get(Stock, (id_producto, id_almacen))
    return stock.cantidad if stock else 0


def aplicar_delta(db: Session, id_producto: int, id_almacen: int, delta: int) -> int:
    """Suma `delta` (con signo) al stock y devuelve la nueva cantidad."""
    stock = db.get(Stock, (id_producto, id_almacen))
    actual = stock.cantidad if stock else 0
    nueva = actual + delta

    if nueva < 0:
        raise StockInsuficiente(
            disponible=actual,
            requerido=abs(delta),
            id_producto=id_producto,
            id_almacen=id_almacen,
        )

    if stock is None:
        stock = Stock(id_producto=id_producto, id_almacen=id_almacen, cantidad=nueva)
    else:
        stock.cantidad = nueva
    db.add(stock)
    db.flush()

    logger.debug(
        "Stock producto=%s almacén=%s: %s -> %s", id_producto, id_almacen, actual, nueva
    )
    return nueva


def stock_total(db: Session, id_producto: int, id_almacen: Optional[int] = None) -> int:
    """Suma del stock del producto en todos los almacenes (o en uno concreto)."""
    statement = select(func.coalesce(func.sum(Stock.cantidad), 0)).where(
        Stock.id_producto == id_producto
    )
    if id_almacen is not None:
        statement = statement.where(Stock.id_almacen == id_almacen)
    return int(db.exec(statement).one())


def nivel_stock(total: int, nivel_reorden: int) -> str:
    """
    - `sin_stock`: total == 0
    - `bajo`: 0 < total < nivel de reorden
    - `ok`: el resto
    """
    if total <= 0:
        return "sin_stock"
    if total < nivel_reorden:
        return "bajo"
    return "ok"


def stock_por_producto(db: Session, id_producto: int) -> list[dict]:
    """Desglose del stock de un producto por almacén."""
    statement = (
        select(Stock.id_almacen, Warehouse.nombre, Stock.cantidad)
        .join(Warehouse, Warehouse.id == Stock.id_almacen)
        .where(Stock.id_producto == id_producto)
        .order_by(Warehouse.nombre)
    )
    return [
        {"id_almacen": id_almacen, "nombre_almacen": nombre, "cantidad": cantidad}
        for id_almacen, nombre, cantidad in db.exec(statement).all()
    ]
