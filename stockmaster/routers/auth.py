"""
Autenticación de usuarios:
- Registro (/auth/registro) → guarda el usuario con la contraseña cifrada.
- Login (/auth/login) → devuelve un access token JWT y deja el refresh token en una cookie HttpOnly.
- Perfil (/auth/perfil) → datos del usuario del token.
- Refresh y logout.

`get_current_user` es la dependencia que protege el resto de la API; el
usuario que devuelve es el que firma los movimientos de stock.
"""

from datetime import timedelta
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from sqlmodel import Session, select
from sqlalchemy.exc import SQLAlchemyError

from stockmaster.models.database import get_db
from stockmaster.models.user import User
from stockmaster.schemas.user import UserCreate, UserResponse
from stockmaster.utils.authentication import (
    ACCESS_TOKEN_DURATION,
    REFRESH_TOKEN_DURATION,
    hash_password,
    verify_password,
    create_access_token,
    decode_access_token,
)
from stockmaster.utils.validation import normalize_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Autenticación"])

oauth2 = OAuth2PasswordBearer(tokenUrl="/auth/login")


### REGISTRO DE USUARIO ###
@router.post(
    "/registro", response_model=UserResponse, status_code=status.HTTP_201_CREATED
)
def register(user_data: UserCreate, db: Session = Depends(get_db)):
    """Registra un nuevo usuario activo con la contraseña cifrada."""
    email = normalize_email(user_data.email)
    try:
        existing_user = db.exec(select(User).where(User.email == email)).first()
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error de conexión con la base de datos",
        )

    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="El correo ya está registrado.",
        )

    new_user = User(
        nombre=user_data.nombre,
        email=email,
        passwd=hash_password(user_data.passwd),
        activo=True,
    )

    try:
        db.add(new_user)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error interno del servidor al registrar el usuario.",
        )
    db.refresh(new_user)
    logger.info("Usuario %s registrado", new_user.id)
    return new_user  # `UserResponse` filtra la contraseña


### LOGIN DE USUARIO ###
@router.post("/login")
def login(
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    """Autentica al usuario y genera un token JWT."""
    try:
        # OAuth2PasswordRequestForm espera username y password; el "username" es el email.
        user = db.exec(
            select(User).where(User.email == normalize_email(form_data.username))
        ).first()
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error de conexión con la base de datos",
        )

    if not user or not verify_password(form_data.password, user.passwd):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Credenciales incorrectas"
        )
    if not user.activo:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="El usuario está inactivo.",
        )

    access_token = create_access_token(
        {"sub": str(user.id)},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_DURATION),
    )
    refresh_token = create_access_token(
        {"sub": str(user.id), "refresh": True},
        expires_delta=timedelta(days=REFRESH_TOKEN_DURATION),
    )

    response.set_cookie(
        key="refresh_token",
        value=refresh_token,
        httponly=True,  # JavaScript no puede leerla
        secure=True,
        samesite="none",  # cookies cross-origin para el frontend
        path="/auth/refresh",
        max_age=REFRESH_TOKEN_DURATION * 24 * 60 * 60,
    )

    return {
        "access_token": access_token,
        "token_type": "bearer",
    }


### USUARIO AUTENTICADO ###
def _load_user(db: Session, user_id) -> User | None:
    try:
        return db.get(User, int(user_id))
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error de conexión con la base de datos",
        )


def get_current_user(token: str = Depends(oauth2), db: Session = Depends(get_db)) -> User:
    """Obtiene el usuario actual a partir del token JWT."""
    payload = decode_access_token(token)

    user_id = payload.get("sub")
    if not user_id or payload.get("refresh"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Token inválido"
        )

    user = _load_user(db, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuario no encontrado o eliminado",
        )
    if not user.activo:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="El usuario está inactivo.",
        )

    return user


@router.get("/perfil", response_model=UserResponse)
def get_profile(user: User = Depends(get_current_user)):
    return user


### REFRESCAR TOKEN ###
@router.post("/refresh")
def refresh_token(request: Request, db: Session = Depends(get_db)):
    """Genera un nuevo access token a partir del refresh token de la cookie."""
    refresh_token = request.cookies.get("refresh_token")

    if not refresh_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token no encontrado en cookies",
        )

    payload = decode_access_token(refresh_token)
    user = _load_user(db, payload.get("sub"))
    if not user or not user.activo:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuario no encontrado o eliminado",
        )

    new_access_token = create_access_token(
        {"sub": str(user.id)},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_DURATION),
    )
    return {"access_token": new_access_token, "token_type": "bearer"}


### LOGOUT ###
@router.post("/logout")
def logout(response: Response):
    """Elimina la cookie de refresh_token al cerrar sesión."""
    response.delete_cookie(
        key="refresh_token", path="/auth/refresh", secure=True, samesite="none"
    )
    return {"message": "Sesión cerrada correctamente"}
