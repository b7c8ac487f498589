from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session
from sqlalchemy.exc import SQLAlchemyError

from stockmaster.models.database import get_db
from stockmaster.models.document import TipoDocumento
from stockmaster.models.product import Categoria
from stockmaster.models.user import User
from stockmaster.routers.auth import get_current_user
from stockmaster.schemas.dashboard import DashboardKPIs, Notificacion
from stockmaster.services.dashboard import calcular_kpis, generar_notificaciones

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/kpis", response_model=DashboardKPIs)
def get_kpis(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    id_almacen: Optional[int] = Query(None),
    categoria: Optional[Categoria] = Query(None),
    tipo_documento: Optional[TipoDocumento] = Query(None),
):
    """Indicadores del panel principal, opcionalmente filtrados."""
    try:
        return calcular_kpis(
            db,
            id_almacen=id_almacen,
            categoria=categoria.value if categoria else None,
            tipo_documento=tipo_documento.value if tipo_documento else None,
        )
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error de conexión con la base de datos",
        )


@router.get("/notificaciones", response_model=List[Notificacion])
def get_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return generar_notificaciones(db)
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error de conexión con la base de datos",
        )
