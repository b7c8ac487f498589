"""Envío de correos por SMTP (STARTTLS). La configuración viene del entorno."""
import logging
import os
import smtplib
from email.message import EmailMessage

from stockmaster.utils.getenv import get_int_env, get_required_env

logger = logging.getLogger(__name__)


def enviar_correo(destinatario: str, asunto: str, texto: str, html: str | None = None):
    """Envía un correo. Lanza `RuntimeError` si falta configuración SMTP
    y deja pasar los errores de `smtplib`; quien llama decide qué responder."""
    host = get_required_env("SMTP_HOST")
    usuario = get_required_env("SMTP_USER")
    password = get_required_env("SMTP_PASSWORD")
    remitente = os.getenv("SMTP_FROM", usuario)

    mensaje = EmailMessage()
    mensaje["From"] = f"StockMaster <{remitente}>"
    mensaje["To"] = destinatario
    mensaje["Subject"] = asunto
    mensaje.set_content(texto)
    if html:
        mensaje.add_alternative(html, subtype="html")

    with smtplib.SMTP(host, get_int_env("SMTP_PORT", 587), timeout=10) as smtp:
        smtp.starttls()
        smtp.login(usuario, password)
        smtp.send_message(mensaje)

    logger.info("Correo '%s' enviado a %s", asunto, destinatario)
