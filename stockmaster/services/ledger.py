"""
Libro de movimientos de stock: solo se añaden entradas, nunca se modifican
ni se borran (lo impiden los listeners de `models.movement`).
"""
import logging
from datetime import date, datetime, time
from typing import Optional

from sqlmodel import Session, func, select

from stockmaster.exceptions import MovimientoInvalido
from stockmaster.models.movement import Movement, TipoMovimiento

logger = logging.getLogger(__name__)

TIPOS_MOVIMIENTO = {tipo.value for tipo in TipoMovimiento}


def registrar_movimiento(
    db: Session,
    *,
    id_producto: int,
    id_almacen: int,
    tipo_movimiento: str,
    tipo_documento: str,
    id_documento: int,
    numero_documento: str,
    cantidad: int,
    stock_anterior: int,
    stock_nuevo: int,
    id_usuario: int,
    notas: Optional[str] = None,
    fecha: Optional[datetime] = None,
) -> Movement:
    """Añade una entrada al libro. Solo rechaza datos mal formados.
    Sin `fecha` se usa el momento actual."""
    if tipo_movimiento not in TIPOS_MOVIMIENTO:
        raise MovimientoInvalido(f"Tipo de movimiento desconocido: {tipo_movimiento}")
    if cantidad == 0:
        raise MovimientoInvalido("La cantidad de un movimiento no puede ser 0.")
    if stock_anterior < 0 or stock_nuevo < 0:
        raise MovimientoInvalido("El stock de un movimiento no puede ser negativo.")
    if stock_nuevo != stock_anterior + cantidad:
        raise MovimientoInvalido(
            f"Movimiento descuadrado: {stock_anterior} + ({cantidad}) != {stock_nuevo}"
        )

    movimiento = Movement(
        id_producto=id_producto,
        id_almacen=id_almacen,
        tipo_movimiento=tipo_movimiento,
        tipo_documento=tipo_documento,
        id_documento=id_documento,
        numero_documento=numero_documento,
        cantidad=cantidad,
        stock_anterior=stock_anterior,
        stock_nuevo=stock_nuevo,
        id_usuario=id_usuario,
        notas=notas,
        fecha=fecha or datetime.now(),
    )
    db.add(movimiento)
    db.flush()
    return movimiento


def _filtrar(
    statement,
    id_producto: Optional[int] = None,
    id_almacen: Optional[int] = None,
    fecha_desde: Optional[date] = None,
    fecha_hasta: Optional[date] = None,
    tipo_movimiento: Optional[str] = None,
    id_documento: Optional[int] = None,
):
    if id_producto is not None:
        statement = statement.where(Movement.id_producto == id_producto)
    if id_almacen is not None:
        statement = statement.where(Movement.id_almacen == id_almacen)
    if fecha_desde:
        statement = statement.where(Movement.fecha >= datetime.combine(fecha_desde, time.min))
    if fecha_hasta:
        # Fecha hasta incluida completa
        statement = statement.where(Movement.fecha <= datetime.combine(fecha_hasta, time.max))
    if tipo_movimiento:
        statement = statement.where(Movement.tipo_movimiento == tipo_movimiento)
    if id_documento is not None:
        statement = statement.where(Movement.id_documento == id_documento)
    return statement


def consultar_movimientos(
    db: Session,
    id_producto: Optional[int] = None,
    id_almacen: Optional[int] = None,
    fecha_desde: Optional[date] = None,
    fecha_hasta: Optional[date] = None,
    tipo_movimiento: Optional[str] = None,
    id_documento: Optional[int] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> tuple[list[Movement], int]:
    """Devuelve (movimientos, total) del más reciente al más antiguo."""
    filtros = dict(
        id_producto=id_producto,
        id_almacen=id_almacen,
        fecha_desde=fecha_desde,
        fecha_hasta=fecha_hasta,
        tipo_movimiento=tipo_movimiento,
        id_documento=id_documento,
    )
    statement = _filtrar(select(Movement), **filtros).order_by(
        Movement.fecha.desc(), Movement.id.desc()
    )
    if limit is not None:
        statement = statement.limit(limit)
    movimientos = db.exec(statement.offset(offset)).all()

    total = db.exec(_filtrar(select(func.count(Movement.id)), **filtros)).one()
    return list(movimientos), total
