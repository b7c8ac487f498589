"""
Documentos de inventario: recepciones, entregas, transferencias internas y ajustes.

Los documentos se crean en Draft, cambian de estado con PUT /{id}/estado y
solo modifican el stock al validarse (POST /{id}/validar).
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session
from sqlalchemy.exc import SQLAlchemyError

from stockmaster.dependencies import get_document
from stockmaster.exceptions import InventarioError
from stockmaster.models.database import get_db
from stockmaster.models.document import Document, EstadoDocumento, TipoDocumento
from stockmaster.models.user import User
from stockmaster.routers.auth import get_current_user
from stockmaster.routers.websocket import notificar_movimientos
from stockmaster.schemas.document import (
    AdjustmentCreate,
    DeliveryCreate,
    DocumentLineResponse,
    DocumentResponse,
    DocumentStatusUpdate,
    PaginatedDocumentResponse,
    ReceiptCreate,
    TransferCreate,
)
from stockmaster.schemas.movement import MovementResponse
from stockmaster.services import documents as servicio

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documentos", tags=["Documentos"])


def _respuesta(db: Session, documento: Document) -> DocumentResponse:
    return DocumentResponse(
        **documento.model_dump(),
        lineas=[
            DocumentLineResponse.model_validate(linea)
            for linea in servicio.lineas_de(db, documento.id)
        ],
    )


def _ejecutar(db: Session, operacion, *args):
    """Ejecuta una operación del servicio traduciendo sus errores a HTTP."""
    try:
        return operacion(db, *args)
    except InventarioError as e:
        raise e.to_http()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error de base de datos en %s", operacion.__name__)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error de conexión con la base de datos",
        )


### CREACIÓN ###
@router.post(
    "/recepciones",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_receipt(
    data: ReceiptCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Crea una recepción de proveedor en estado Draft."""
    documento = _ejecutar(db, servicio.crear_documento, data, current_user)
    return _respuesta(db, documento)


@router.post(
    "/entregas",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_delivery(
    data: DeliveryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Crea una entrega a cliente. Falla con 409 si hoy no hay stock suficiente."""
    documento = _ejecutar(db, servicio.crear_documento, data, current_user)
    return _respuesta(db, documento)


@router.post(
    "/transferencias",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_transfer(
    data: TransferCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    documento = _ejecutar(db, servicio.crear_documento, data, current_user)
    return _respuesta(db, documento)


@router.post(
    "/ajustes",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_adjustment(
    data: AdjustmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Crea un ajuste. Las líneas sin diferencia entre físico y registrado se descartan."""
    documento = _ejecutar(db, servicio.crear_documento, data, current_user)
    return _respuesta(db, documento)


### CONSULTAS ###
@router.get("/", response_model=PaginatedDocumentResponse)
def get_documents(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limit: int = Query(10, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    tipo: Optional[TipoDocumento] = Query(None),
    estado: Optional[EstadoDocumento] = Query(None),
    id_almacen: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
):
    """Lista documentos, del más reciente al más antiguo.
    `search` busca en el número y en el proveedor/cliente."""
    try:
        documentos, total = servicio.listar_documentos(
            db,
            tipo=tipo.value if tipo else None,
            estado=estado.value if estado else None,
            id_almacen=id_almacen,
            search=search,
            limit=limit,
            offset=offset,
        )
        data = [_respuesta(db, documento) for documento in documentos]
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error de conexión con la base de datos",
        )

    return {
        "data": data,
        "total": total,
        "limit": limit,
        "offset": offset,
    }


@router.get("/{id_documento}", response_model=DocumentResponse)
def get_document_detail(
    documento: Document = Depends(get_document),
    db: Session = Depends(get_db),
):
    try:
        return _respuesta(db, documento)
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error de conexión con la base de datos",
        )


### ESTADO Y VALIDACIÓN ###
@router.put("/{id_documento}/estado", response_model=DocumentResponse)
def update_document_status(
    data: DocumentStatusUpdate,
    documento: Document = Depends(get_document),
    db: Session = Depends(get_db),
):
    """Cambia el estado a Waiting, Ready o Canceled. Done y Canceled son finales."""
    documento = _ejecutar(db, servicio.cambiar_estado, documento, data.estado)
    return _respuesta(db, documento)


@router.post("/{id_documento}/validar", response_model=List[MovementResponse])
def validate_document(
    documento: Document = Depends(get_document),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Valida el documento: pasa a Done, actualiza el stock y registra los movimientos.
    Si alguna línea no tiene stock suficiente no se aplica nada (409)."""
    movimientos = _ejecutar(db, servicio.validar_documento, documento, current_user)

    notificar_movimientos(documento, movimientos)

    return movimientos
