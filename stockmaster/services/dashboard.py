"""KPIs del panel principal y notificaciones (stock bajo, sin stock, documentos pendientes)."""
from typing import Optional

from sqlmodel import Session, func, or_, select

from stockmaster.models.document import Document, TipoDocumento
from stockmaster.models.product import Product
from stockmaster.models.stock import Stock
from stockmaster.models.warehouse import Warehouse
from stockmaster.services.documents import PENDIENTES
from stockmaster.services.stock import nivel_stock


def _totales_por_producto(db: Session, id_almacen: Optional[int] = None) -> dict[int, int]:
    statement = select(Stock.id_producto, func.sum(Stock.cantidad)).group_by(Stock.id_producto)
    if id_almacen is not None:
        statement = statement.where(Stock.id_almacen == id_almacen)
    return {id_producto: int(total or 0) for id_producto, total in db.exec(statement).all()}


def _contar_pendientes(
    db: Session,
    tipo: TipoDocumento,
    id_almacen: Optional[int] = None,
    tipo_documento: Optional[str] = None,
) -> int:
    if tipo_documento and tipo_documento != tipo.value:
        return 0

    statement = select(func.count(Document.id)).where(
        Document.tipo == tipo.value,
        Document.estado.in_(sorted(PENDIENTES[tipo.value])),
    )
    if id_almacen is not None:
        if tipo == TipoDocumento.INTERNAL:
            statement = statement.where(
                or_(Document.id_almacen == id_almacen, Document.id_almacen_destino == id_almacen)
            )
        else:
            statement = statement.where(Document.id_almacen == id_almacen)
    return db.exec(statement).one()


def calcular_kpis(
    db: Session,
    id_almacen: Optional[int] = None,
    categoria: Optional[str] = None,
    tipo_documento: Optional[str] = None,
) -> dict:
    """
    - `stock_bajo` / `sin_stock` se calculan con el stock del almacén filtrado (o de todos).
    - Entregas pendientes incluyen las que están en Ready.
    - Las transferencias cuentan si el almacén es el origen o el destino.
    """
    statement = select(Product)
    if categoria:
        statement = statement.where(Product.categoria == categoria)
    productos = db.exec(statement).all()

    totales = _totales_por_producto(db, id_almacen)
    stock_bajo = 0
    sin_stock = 0
    for producto in productos:
        nivel = nivel_stock(totales.get(producto.id, 0), producto.nivel_reorden)
        if nivel == "sin_stock":
            sin_stock += 1
        elif nivel == "bajo":
            stock_bajo += 1

    return {
        "total_productos": len(productos),
        "stock_bajo": stock_bajo,
        "sin_stock": sin_stock,
        "recepciones_pendientes": _contar_pendientes(
            db, TipoDocumento.RECEIPT, id_almacen, tipo_documento
        ),
        "entregas_pendientes": _contar_pendientes(
            db, TipoDocumento.DELIVERY, id_almacen, tipo_documento
        ),
        "transferencias_programadas": _contar_pendientes(
            db, TipoDocumento.INTERNAL, id_almacen, tipo_documento
        ),
    }


def generar_notificaciones(db: Session) -> list[dict]:
    """Avisos de stock y de documentos pendientes, del más reciente al más antiguo."""
    notificaciones = []
    totales = _totales_por_producto(db)

    for producto in db.exec(select(Product)).all():
        total = totales.get(producto.id, 0)
        nivel = nivel_stock(total, producto.nivel_reorden)
        if nivel == "sin_stock":
            notificaciones.append(
                {
                    "id": f"out-{producto.id}",
                    "tipo": "out_of_stock",
                    "titulo": "Sin stock",
                    "mensaje": f"{producto.nombre} ({producto.sku}) no tiene stock.",
                    "severidad": "error",
                    "fecha": producto.actualizado_en,
                    "id_producto": producto.id,
                }
            )
        elif nivel == "bajo":
            notificaciones.append(
                {
                    "id": f"low-{producto.id}",
                    "tipo": "low_stock",
                    "titulo": "Stock bajo",
                    "mensaje": (
                        f"{producto.nombre} ({producto.sku}) está por debajo del nivel de reorden. "
                        f"Actual: {total}, Reorden: {producto.nivel_reorden}"
                    ),
                    "severidad": "warning",
                    "fecha": producto.actualizado_en,
                    "id_producto": producto.id,
                }
            )

    almacenes = dict(db.exec(select(Warehouse.id, Warehouse.nombre)).all())
    avisos = {
        TipoDocumento.RECEIPT.value: ("pending_receipt", "Recepción pendiente"),
        TipoDocumento.DELIVERY.value: ("pending_delivery", "Entrega pendiente"),
        TipoDocumento.INTERNAL.value: ("pending_transfer", "Transferencia pendiente"),
    }
    for tipo, (clave, titulo) in avisos.items():
        documentos = db.exec(
            select(Document).where(Document.tipo == tipo, Document.estado.in_(sorted(PENDIENTES[tipo])))
        ).all()
        for documento in documentos:
            if tipo == TipoDocumento.RECEIPT.value:
                mensaje = f"La recepción {documento.numero} de {documento.contraparte} está pendiente de validar"
            elif tipo == TipoDocumento.DELIVERY.value:
                mensaje = f"La entrega {documento.numero} a {documento.contraparte} está pendiente de validar"
            else:
                mensaje = (
                    f"La transferencia {documento.numero} de {almacenes.get(documento.id_almacen)} "
                    f"a {almacenes.get(documento.id_almacen_destino)} está pendiente de validar"
                )
            notificaciones.append(
                {
                    "id": f"{clave}-{documento.id}",
                    "tipo": clave,
                    "titulo": titulo,
                    "mensaje": mensaje,
                    "severidad": "info",
                    "fecha": documento.creado_en,
                    "id_documento": documento.id,
                }
            )

    return sorted(notificaciones, key=lambda n: n["fecha"], reverse=True)
