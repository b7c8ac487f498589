"""
Restablecimiento de contraseña por OTP. Rutas públicas (sin token).

Todas las respuestas tienen la forma `{success, message}` o `{success, error}`.
Los errores internos (base de datos, SMTP) se registran en el log y al
cliente solo le llega un mensaje genérico.
"""
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlmodel import Session

from stockmaster.exceptions import InventarioError
from stockmaster.models.database import get_db
from stockmaster.schemas.otp import (
    OtpResponse,
    ResetPasswordRequest,
    SendOtpRequest,
    VerifyOtpRequest,
)
from stockmaster.services import otp as servicio

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/otp", tags=["OTP"])


def _ok(mensaje: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"success": True, "message": mensaje},
    )


def _error(status_code: int, mensaje: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "error": mensaje}
    )


@router.post("/sendOtpEmail", response_model=OtpResponse)
def send_otp_email(data: SendOtpRequest, db: Session = Depends(get_db)):
    """Genera un OTP y lo envía al email indicado."""
    try:
        servicio.enviar_otp(db, data.email)
    except InventarioError as e:
        return _error(e.status_code, e.mensaje)
    except Exception:
        logger.exception("Error enviando el OTP")
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "No se pudo enviar el OTP. Inténtalo de nuevo más tarde.",
        )
    return _ok("OTP enviado correctamente a tu email")


@router.post("/verifyOtp", response_model=OtpResponse)
def verify_otp(data: VerifyOtpRequest, db: Session = Depends(get_db)):
    try:
        servicio.verificar_otp(db, data.email, data.otp)
    except InventarioError as e:
        return _error(e.status_code, e.mensaje)
    except Exception:
        logger.exception("Error verificando el OTP")
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "No se pudo verificar el OTP. Inténtalo de nuevo más tarde.",
        )
    return _ok("OTP verificado correctamente")


@router.post("/resetPassword", response_model=OtpResponse)
def reset_password(data: ResetPasswordRequest, db: Session = Depends(get_db)):
    try:
        servicio.restablecer_password(db, data.email, data.newPassword)
    except InventarioError as e:
        return _error(e.status_code, e.mensaje)
    except Exception:
        logger.exception("Error restableciendo la contraseña")
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "No se pudo restablecer la contraseña. Inténtalo de nuevo más tarde.",
        )
    return _ok("Contraseña restablecida correctamente")
