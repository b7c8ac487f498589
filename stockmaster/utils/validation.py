import re

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
OTP_REGEX = re.compile(r"^\d{6}$")


def normalize_code(codigo: str) -> str:
    """Normaliza el código de un almacén para compararlo:
    - Elimina espacios al principio y al final
    - Lo pasa a mayúsculas
    """
    return codigo.strip().upper()


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    """Devuelve True si el email tiene un formato válido (algo@dominio.ext)."""
    return bool(EMAIL_REGEX.match(email))


def is_valid_otp(otp: str) -> bool:
    """El OTP siempre son 6 dígitos numéricos."""
    return bool(OTP_REGEX.match(otp))
