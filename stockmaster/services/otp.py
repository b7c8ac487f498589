"""
Restablecimiento de contraseña con un código OTP enviado por email.

1. `enviar_otp`: genera un código de 6 dígitos, guarda solo su hash (bcrypt)
   con caducidad y lo envía por correo. Los códigos anteriores sin usar de ese
   email quedan marcados como usados.
2. `verificar_otp`: comprueba el código más reciente sin usar y lo consume.
3. `restablecer_password`: exige un OTP verificado en los últimos 30 minutos.

Los códigos nunca se escriben en los logs.
"""
import logging
from datetime import datetime, timedelta

from sqlmodel import Session, select

from stockmaster.exceptions import NoEncontrado, OtpInvalido
from stockmaster.models.otp import Otp
from stockmaster.models.user import User
from stockmaster.services.mailer import enviar_correo
from stockmaster.utils.authentication import (
    generate_otp,
    hash_otp,
    hash_password,
    verify_otp,
)
from stockmaster.utils.getenv import get_int_env
from stockmaster.utils.validation import is_valid_email, is_valid_otp, normalize_email

logger = logging.getLogger(__name__)

OTP_EXPIRY_MINUTES = get_int_env("OTP_EXPIRY_MINUTES", 10)
VERIFICACION_VALIDA_MINUTOS = 30
PASSWORD_MIN_LENGTH = 8


def _email_valido(email) -> str:
    if not email or not isinstance(email, str):
        raise OtpInvalido("El email es obligatorio y debe ser un texto")
    if not is_valid_email(email.strip()):
        raise OtpInvalido("Formato de email no válido")
    return normalize_email(email)


def enviar_otp(db: Session, email) -> None:
    email = _email_valido(email)
    codigo = generate_otp()
    ahora = datetime.now()

    try:
        anteriores = db.exec(
            select(Otp).where(Otp.email == email, Otp.usado == False)
        ).all()
        for anterior in anteriores:
            anterior.usado = True
            db.add(anterior)

        db.add(
            Otp(
                email=email,
                otp_hash=hash_otp(codigo),
                expira_en=ahora + timedelta(minutes=OTP_EXPIRY_MINUTES),
                usado=False,
                creado_en=ahora,
            )
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("OTP generado para %s", email)

    enviar_correo(
        email,
        "Tu código de verificación",
        f"Tu código es: {codigo}. Caduca en {OTP_EXPIRY_MINUTES} minutos.",
        html=(
            '<div style="font-family: Arial, sans-serif;">'
            "<h2>Tu código de verificación</h2>"
            f'<h1 style="letter-spacing: 5px;">{codigo}</h1>'
            f"<p>Caduca en {OTP_EXPIRY_MINUTES} minutos.</p>"
            "<p>Si no has solicitado este código, ignora este correo.</p>"
            "</div>"
        ),
    )


def verificar_otp(db: Session, email, otp) -> None:
    email = _email_valido(email)
    if not otp or not isinstance(otp, str):
        raise OtpInvalido("El OTP es obligatorio y debe ser un texto")
    if not is_valid_otp(otp):
        raise OtpInvalido("El OTP debe ser un número de 6 dígitos")

    registro = db.exec(
        select(Otp)
        .where(Otp.email == email, Otp.usado == False)
        .order_by(Otp.creado_en.desc(), Otp.id.desc())
    ).first()
    if not registro:
        raise NoEncontrado("No hay ningún OTP válido para este email")

    if registro.expira_en < datetime.now():
        # Aunque no se use, un OTP caducado queda invalidado
        registro.usado = True
        db.add(registro)
        db.commit()
        raise OtpInvalido("El OTP ha caducado. Solicita uno nuevo.")

    if not verify_otp(otp, registro.otp_hash):
        logger.warning("Intento de OTP incorrecto para %s", email)
        raise OtpInvalido("OTP incorrecto")

    registro.usado = True
    registro.verificado_en = datetime.now()
    db.add(registro)
    db.commit()
    logger.info("OTP verificado para %s", email)


def restablecer_password(db: Session, email, nueva_password) -> None:
    email = _email_valido(email)
    if not nueva_password or not isinstance(nueva_password, str):
        raise OtpInvalido("La nueva contraseña es obligatoria y debe ser un texto")
    if len(nueva_password) < PASSWORD_MIN_LENGTH:
        raise OtpInvalido(
            f"La contraseña debe tener al menos {PASSWORD_MIN_LENGTH} caracteres"
        )

    verificado = db.exec(
        select(Otp)
        .where(
            Otp.email == email,
            Otp.verificado_en != None,
            Otp.reset_realizado == False,
        )
        .order_by(Otp.verificado_en.desc())
    ).first()
    if not verificado:
        raise OtpInvalido("OTP no verificado. Verifica el OTP primero.")
    if verificado.verificado_en < datetime.now() - timedelta(minutes=VERIFICACION_VALIDA_MINUTOS):
        raise OtpInvalido("La verificación del OTP ha caducado. Verifica el OTP de nuevo.")

    user = db.exec(select(User).where(User.email == email)).first()
    if not user:
        raise NoEncontrado("No existe ninguna cuenta con este email")

    user.passwd = hash_password(nueva_password)
    verificado.reset_realizado = True
    db.add(user)
    db.add(verificado)
    db.commit()
    logger.info("Contraseña restablecida para %s", email)
