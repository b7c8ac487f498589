from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session
from sqlalchemy.exc import SQLAlchemyError

from stockmaster.dependencies import get_document
from stockmaster.models.database import get_db
from stockmaster.models.document import Document
from stockmaster.models.movement import TipoMovimiento
from stockmaster.models.user import User
from stockmaster.routers.auth import get_current_user
from stockmaster.schemas.movement import PaginatedMovementsResponse
from stockmaster.services.ledger import consultar_movimientos

router = APIRouter(prefix="/movimientos", tags=["Movimientos"])


@router.get("/", response_model=PaginatedMovementsResponse)
def get_movements(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limit: int = Query(10, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    id_producto: Optional[int] = Query(None),
    id_almacen: Optional[int] = Query(None),
    tipo_movimiento: Optional[TipoMovimiento] = Query(None),
    fecha_desde: Optional[date] = Query(None),
    fecha_hasta: Optional[date] = Query(None),
):
    """Consulta el libro de movimientos, del más reciente al más antiguo."""
    if fecha_desde and fecha_hasta and fecha_desde > fecha_hasta:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="La fecha desde no puede ser posterior a la fecha hasta.",
        )

    try:
        movimientos, total = consultar_movimientos(
            db,
            id_producto=id_producto,
            id_almacen=id_almacen,
            fecha_desde=fecha_desde,
            fecha_hasta=fecha_hasta,
            tipo_movimiento=tipo_movimiento.value if tipo_movimiento else None,
            limit=limit,
            offset=offset,
        )
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error de conexión con la base de datos",
        )

    return {
        "data": movimientos,
        "total": total,
        "limit": limit,
        "offset": offset,
    }


@router.get("/documento/{id_documento}", response_model=PaginatedMovementsResponse)
def get_document_movements(
    documento: Document = Depends(get_document),
    db: Session = Depends(get_db),
):
    """Movimientos generados al validar un documento (vacío si no está validado)."""
    try:
        movimientos, total = consultar_movimientos(db, id_documento=documento.id)
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error de conexión con la base de datos",
        )

    return {
        "data": movimientos,
        "total": total,
        "limit": max(total, 1),
        "offset": 0,
    }
