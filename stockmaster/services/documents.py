"""
Flujo de documentos: recepciones, entregas, transferencias internas y ajustes.

Estados: Draft → Waiting → Ready → Done, o → Canceled desde cualquier estado
no terminal. `Done` solo se alcanza con `validar_documento`, que es el único
punto donde se toca el stock y el libro de movimientos.

La validación es una unidad de trabajo: primero se comprueba el stock de
todas las líneas sobre una foto tomada antes de modificar nada y después se
aplican todos los cambios en la misma transacción. Si algo falla se hace
rollback completo.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlmodel import Session, func, or_, select

from stockmaster.exceptions import (
    AlmacenesInvalidos,
    DocumentoVacio,
    NoEncontrado,
    ReferenciaInvalida,
    StockInsuficiente,
    TransicionInvalida,
)
from stockmaster.models.document import (
    PREFIJOS,
    Document,
    DocumentLine,
    EstadoDocumento,
    TipoDocumento,
)
from stockmaster.models.movement import Movement, TipoMovimiento
from stockmaster.models.product import Product
from stockmaster.models.sequence import DocumentSequence
from stockmaster.models.user import User
from stockmaster.models.warehouse import Warehouse
from stockmaster.schemas.document import (
    AdjustmentCreate,
    DeliveryCreate,
    ReceiptCreate,
    TransferCreate,
)
from stockmaster.services import ledger
from stockmaster.services.stock import aplicar_delta, get_stock

logger = logging.getLogger(__name__)

DRAFT = EstadoDocumento.DRAFT.value
WAITING = EstadoDocumento.WAITING.value
READY = EstadoDocumento.READY.value
DONE = EstadoDocumento.DONE.value
CANCELED = EstadoDocumento.CANCELED.value

# Las entregas solo se validan cuando están preparadas (Ready)
ESTADOS_VALIDABLES = {
    TipoDocumento.RECEIPT.value: {DRAFT, WAITING},
    TipoDocumento.DELIVERY.value: {READY},
    TipoDocumento.INTERNAL.value: {DRAFT, WAITING},
    TipoDocumento.ADJUSTMENT.value: {DRAFT, WAITING},
}

TRANSICIONES = {
    DRAFT: {WAITING, READY, CANCELED},
    WAITING: {READY, CANCELED},
    READY: {CANCELED},
    DONE: set(),
    CANCELED: set(),
}

# Estados que cuentan como pendientes en el dashboard y las notificaciones
PENDIENTES = {
    TipoDocumento.RECEIPT.value: {DRAFT, WAITING},
    TipoDocumento.DELIVERY.value: {DRAFT, WAITING, READY},
    TipoDocumento.INTERNAL.value: {DRAFT, WAITING},
    TipoDocumento.ADJUSTMENT.value: {DRAFT, WAITING},
}


### NUMERACIÓN ###
def siguiente_numero(db: Session, tipo: str) -> str:
    """Siguiente número del tipo de documento: `<PREFIJO>-<secuencia de 6 dígitos>`.
    La secuencia se bloquea (FOR UPDATE) y se incrementa en la transacción actual."""
    prefijo = PREFIJOS[TipoDocumento(tipo)]
    secuencia = db.exec(
        select(DocumentSequence)
        .where(DocumentSequence.prefijo == prefijo)
        .with_for_update()
    ).first()
    if secuencia is None:
        secuencia = DocumentSequence(prefijo=prefijo, ultimo=0)

    secuencia.ultimo += 1
    db.add(secuencia)
    db.flush()
    return f"{prefijo}-{secuencia.ultimo:06d}"


### CONSULTAS ###
def obtener_documento(db: Session, id_documento: int) -> Document:
    documento = db.get(Document, id_documento)
    if not documento:
        raise NoEncontrado("Documento no encontrado")
    return documento


def lineas_de(db: Session, id_documento: int) -> list[DocumentLine]:
    return list(
        db.exec(
            select(DocumentLine)
            .where(DocumentLine.id_documento == id_documento)
            .order_by(DocumentLine.id_linea)
        ).all()
    )


def listar_documentos(
    db: Session,
    tipo: Optional[str] = None,
    estado: Optional[str] = None,
    id_almacen: Optional[int] = None,
    search: Optional[str] = None,
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[Document], int]:
    """Documentos filtrados, del más reciente al más antiguo.
    El filtro de almacén incluye el destino de las transferencias."""
    statement = select(Document)

    if tipo:
        statement = statement.where(Document.tipo == tipo)
    if estado:
        statement = statement.where(Document.estado == estado)
    if id_almacen is not None:
        statement = statement.where(
            or_(Document.id_almacen == id_almacen, Document.id_almacen_destino == id_almacen)
        )
    if search:
        search_like = f"%{search.lower()}%"
        statement = statement.where(
            func.lower(Document.numero).like(search_like)
            | func.lower(func.coalesce(Document.contraparte, "")).like(search_like)
        )

    total = db.exec(select(func.count()).select_from(statement.subquery())).one()
    documentos = db.exec(
        statement.order_by(Document.creado_en.desc(), Document.id.desc())
        .limit(limit)
        .offset(offset)
    ).all()
    return list(documentos), total


### CREACIÓN ###
def _comprobar_referencias(db: Session, almacenes: set[int], productos: set[int]):
    existentes = set(db.exec(select(Warehouse.id).where(Warehouse.id.in_(almacenes))).all())
    faltan = almacenes - existentes
    if faltan:
        raise ReferenciaInvalida(f"Los siguientes almacenes no existen: {sorted(faltan)}")

    existentes = set(db.exec(select(Product.id).where(Product.id.in_(productos))).all())
    faltan = productos - existentes
    if faltan:
        raise ReferenciaInvalida(f"Los siguientes productos no existen: {sorted(faltan)}")


def _comprobar_disponibilidad(db: Session, id_almacen: int, salidas: list[tuple[int, int]]):
    """Aviso temprano al crear: cada salida (producto, cantidad) debe tener stock hoy.
    La validación lo vuelve a comprobar."""
    pedidas: dict[int, int] = {}
    for id_producto, cantidad in salidas:
        pedidas[id_producto] = pedidas.get(id_producto, 0) + cantidad

    for id_producto, cantidad in pedidas.items():
        disponible = get_stock(db, id_producto, id_almacen)
        if disponible < cantidad:
            raise StockInsuficiente(disponible, cantidad, id_producto, id_almacen)


def _crear(
    db: Session,
    usuario: User,
    tipo: TipoDocumento,
    lineas: list[DocumentLine],
    salidas: Optional[list[tuple[int, int]]] = None,
    **campos,
) -> Document:
    if not lineas:
        raise DocumentoVacio("El documento debe contener al menos una línea válida.")

    almacenes = {campos["id_almacen"]}
    if campos.get("id_almacen_destino") is not None:
        almacenes.add(campos["id_almacen_destino"])

    try:
        _comprobar_referencias(db, almacenes, {linea.id_producto for linea in lineas})
        if salidas:
            _comprobar_disponibilidad(db, campos["id_almacen"], salidas)

        documento = Document(
            numero=siguiente_numero(db, tipo.value),
            tipo=tipo.value,
            estado=DRAFT,
            id_usuario=usuario.id,
            **campos,
        )
        db.add(documento)
        db.flush()

        for i, linea in enumerate(lineas, 1):
            linea.id_documento = documento.id
            linea.id_linea = i
            db.add(linea)

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(documento)
    logger.info(
        "Documento %s creado (%s, %d líneas) por usuario %s",
        documento.numero,
        documento.tipo,
        len(lineas),
        usuario.id,
    )
    return documento


def _lineas_validas(datos) -> list[DocumentLine]:
    """Descarta las líneas sin producto o sin cantidad."""
    return [
        DocumentLine(id_producto=linea.id_producto, cantidad=linea.cantidad, notas=linea.notas)
        for linea in datos.lineas
        if linea.id_producto and linea.cantidad > 0
    ]


def crear_recepcion(db: Session, datos: ReceiptCreate, usuario: User) -> Document:
    return _crear(
        db,
        usuario,
        TipoDocumento.RECEIPT,
        _lineas_validas(datos),
        id_almacen=datos.id_almacen,
        contraparte=datos.proveedor,
        contacto=datos.contacto,
        notas=datos.notas,
    )


def crear_entrega(db: Session, datos: DeliveryCreate, usuario: User) -> Document:
    lineas = _lineas_validas(datos)
    return _crear(
        db,
        usuario,
        TipoDocumento.DELIVERY,
        lineas,
        salidas=[(linea.id_producto, linea.cantidad) for linea in lineas],
        id_almacen=datos.id_almacen,
        contraparte=datos.cliente,
        contacto=datos.contacto,
        notas=datos.notas,
    )


def crear_transferencia(db: Session, datos: TransferCreate, usuario: User) -> Document:
    if datos.id_almacen_origen == datos.id_almacen_destino:
        raise AlmacenesInvalidos(
            "El almacén de origen y el de destino deben ser distintos."
        )
    lineas = _lineas_validas(datos)
    return _crear(
        db,
        usuario,
        TipoDocumento.INTERNAL,
        lineas,
        salidas=[(linea.id_producto, linea.cantidad) for linea in lineas],
        id_almacen=datos.id_almacen_origen,
        id_almacen_destino=datos.id_almacen_destino,
        notas=datos.notas,
    )


def crear_ajuste(db: Session, datos: AdjustmentCreate, usuario: User) -> Document:
    lineas = []
    for linea in datos.lineas:
        diferencia = linea.cantidad_fisica - linea.cantidad_registrada
        # Sin producto o sin diferencia no hay nada que ajustar
        if not linea.id_producto or diferencia == 0:
            continue
        lineas.append(
            DocumentLine(
                id_producto=linea.id_producto,
                cantidad=abs(diferencia),
                cantidad_registrada=linea.cantidad_registrada,
                cantidad_fisica=linea.cantidad_fisica,
                diferencia=diferencia,
                notas=linea.notas,
            )
        )

    return _crear(
        db,
        usuario,
        TipoDocumento.ADJUSTMENT,
        lineas,
        salidas=[(linea.id_producto, linea.cantidad) for linea in lineas if linea.diferencia < 0],
        id_almacen=datos.id_almacen,
        tipo_ajuste=datos.tipo_ajuste.value,
        notas=datos.notas,
    )


def crear_documento(db: Session, datos, usuario: User) -> Document:
    """Crea el documento que corresponde al esquema recibido, en estado Draft."""
    if isinstance(datos, ReceiptCreate):
        return crear_recepcion(db, datos, usuario)
    if isinstance(datos, DeliveryCreate):
        return crear_entrega(db, datos, usuario)
    if isinstance(datos, TransferCreate):
        return crear_transferencia(db, datos, usuario)
    if isinstance(datos, AdjustmentCreate):
        return crear_ajuste(db, datos, usuario)
    raise TypeError(f"Tipo de documento no soportado: {type(datos).__name__}")


### CAMBIOS DE ESTADO ###
def cambiar_estado(db: Session, documento: Document, nuevo_estado: str) -> Document:
    """Transiciones manuales (Waiting, Ready, Canceled). Done y Canceled son finales."""
    if nuevo_estado == DONE:
        raise TransicionInvalida("Para pasar un documento a Done hay que validarlo.")
    if nuevo_estado not in TRANSICIONES.get(documento.estado, set()):
        raise TransicionInvalida(
            f"No se puede pasar el documento {documento.numero} de {documento.estado} a {nuevo_estado}."
        )

    anterior = documento.estado
    documento.estado = nuevo_estado
    try:
        db.add(documento)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(documento)

    logger.info("Documento %s: %s -> %s", documento.numero, anterior, nuevo_estado)
    return documento


### VALIDACIÓN ###
def efectos(documento: Document, lineas: list[DocumentLine]) -> list[tuple[int, int, int, str]]:
    """Cambios de stock que produce validar el documento, en orden de aplicación:
    (id_producto, id_almacen, delta, tipo_movimiento)."""
    resultado = []
    for linea in lineas:
        if documento.tipo == TipoDocumento.RECEIPT.value:
            resultado.append(
                (linea.id_producto, documento.id_almacen, linea.cantidad, TipoMovimiento.RECEIPT.value)
            )
        elif documento.tipo == TipoDocumento.DELIVERY.value:
            resultado.append(
                (linea.id_producto, documento.id_almacen, -linea.cantidad, TipoMovimiento.DELIVERY.value)
            )
        elif documento.tipo == TipoDocumento.INTERNAL.value:
            resultado.append(
                (linea.id_producto, documento.id_almacen, -linea.cantidad, TipoMovimiento.TRANSFER_OUT.value)
            )
            resultado.append(
                (linea.id_producto, documento.id_almacen_destino, linea.cantidad, TipoMovimiento.TRANSFER_IN.value)
            )
        elif documento.tipo == TipoDocumento.ADJUSTMENT.value:
            if linea.diferencia:
                resultado.append(
                    (linea.id_producto, documento.id_almacen, linea.diferencia, TipoMovimiento.ADJUSTMENT.value)
                )
    return resultado


def comprobar_stock(db: Session, cambios: list[tuple[int, int, int, str]]):
    """Suma las salidas de cada (producto, almacén) y las compara con el stock
    previo a cualquier modificación. Si alguna supera lo disponible, lanza
    `StockInsuficiente` con el saldo real y el total requerido, sin tocar nada."""
    requeridos: dict[tuple[int, int], int] = {}
    for id_producto, id_almacen, delta, _ in cambios:
        if delta < 0:
            clave = (id_producto, id_almacen)
            requeridos[clave] = requeridos.get(clave, 0) - delta

    for (id_producto, id_almacen), requerido in requeridos.items():
        disponible = get_stock(db, id_producto, id_almacen)
        if requerido > disponible:
            raise StockInsuficiente(disponible, requerido, id_producto, id_almacen)


def validar_documento(db: Session, documento: Document, usuario: User) -> list[Movement]:
    """Valida el documento: pasa a Done, aplica el stock y registra un movimiento
    por cada (producto, almacén) afectado. Todo o nada."""
    # Fila bloqueada hasta el commit; el estado se relee de la base de datos
    documento = db.exec(
        select(Document)
        .where(Document.id == documento.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).one()

    if documento.estado not in ESTADOS_VALIDABLES[documento.tipo]:
        permitidos = ", ".join(sorted(ESTADOS_VALIDABLES[documento.tipo]))
        raise TransicionInvalida(
            f"El documento {documento.numero} está en estado {documento.estado}; "
            f"solo se puede validar desde: {permitidos}."
        )

    lineas = lineas_de(db, documento.id)
    if not lineas:
        raise DocumentoVacio(f"El documento {documento.numero} no tiene líneas.")

    cambios = efectos(documento, lineas)
    try:
        comprobar_stock(db, cambios)
    except StockInsuficiente as e:
        logger.warning("Validación de %s rechazada: %s", documento.numero, e.mensaje)
        raise

    movimientos = []
    try:
        documento.estado = DONE
        documento.validado_en = datetime.now()
        db.add(documento)

        for id_producto, id_almacen, delta, tipo_movimiento in cambios:
            anterior = get_stock(db, id_producto, id_almacen)
            nuevo = aplicar_delta(db, id_producto, id_almacen, delta)
            movimientos.append(
                ledger.registrar_movimiento(
                    db,
                    id_producto=id_producto,
                    id_almacen=id_almacen,
                    tipo_movimiento=tipo_movimiento,
                    tipo_documento=documento.tipo,
                    id_documento=documento.id,
                    numero_documento=documento.numero,
                    cantidad=delta,
                    stock_anterior=anterior,
                    stock_nuevo=nuevo,
                    id_usuario=usuario.id,
                    fecha=documento.validado_en,
                )
            )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Error validando el documento %s; cambios deshechos", documento.numero)
        raise

    db.refresh(documento)
    for movimiento in movimientos:
        db.refresh(movimiento)

    logger.info(
        "Documento %s validado por usuario %s: %d movimientos",
        documento.numero,
        usuario.id,
        len(movimientos),
    )
    return movimientos
