from fastapi import Depends, HTTPException, status
from sqlmodel import Session
from sqlalchemy.exc import SQLAlchemyError

from stockmaster.exceptions import NoEncontrado
from stockmaster.models.database import get_db
from stockmaster.models.document import Document
from stockmaster.models.user import User
from stockmaster.routers.auth import get_current_user
from stockmaster.services.documents import obtener_documento


def get_document(
    id_documento: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Document:
    """Carga el documento de la ruta o responde 404."""
    try:
        return obtener_documento(db, id_documento)
    except NoEncontrado as e:
        raise e.to_http()
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error de conexión con la base de datos",
        )
