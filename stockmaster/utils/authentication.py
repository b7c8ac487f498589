# Autenticación de la API: tokens JWT para las sesiones y bcrypt para contraseñas y códigos OTP.
# https://fastapi.tiangolo.com/tutorial/security/oauth2-jwt/
from datetime import datetime, timedelta, timezone
import secrets

from fastapi import HTTPException, status
from passlib.context import CryptContext
import jwt

from stockmaster.utils.getenv import get_int_env, get_required_env

# Clave secreta para firmar JWT
SECRET_KEY = get_required_env("SECRET_KEY")

ALGORITHM = "HS256"

ACCESS_TOKEN_DURATION = get_int_env("ACCESS_TOKEN_DURATION", 30)  # minutos
REFRESH_TOKEN_DURATION = get_int_env("REFRESH_TOKEN_DURATION", 7)  # días

"""
Un único CryptContext para contraseñas y códigos OTP.
bcrypt añade sal a cada hash, así que dos hashes del mismo código nunca coinciden,
pero verify() sigue sabiendo compararlos.
"""
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def generate_otp() -> str:
    """Genera un código OTP de 6 dígitos (100000-999999)."""
    return str(100000 + secrets.randbelow(900000))


def hash_otp(otp: str) -> str:
    return pwd_context.hash(otp)


def verify_otp(otp: str, otp_hash: str) -> bool:
    return pwd_context.verify(otp, otp_hash)


def create_access_token(data: dict, expires_delta: timedelta) -> str:
    """Crea un token JWT firmado con fecha de expiración (`exp`)."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Decodifica un token JWT o lanza 401 si está caducado o es inválido."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expirado"
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Token inválido"
        )
