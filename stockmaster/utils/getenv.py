from dotenv import (
    load_dotenv,
)  # Para cargar variables de entorno desde un archivo .env.
import os  # Para acceder a variables de entorno.

load_dotenv()


def get_required_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"La variable de entorno {name} es obligatoria y no está definida.")
    return value


def get_int_env(name: str, default: int) -> int:
    """Lee una variable de entorno entera, usando `default` si no existe."""
    return int(os.getenv(name, default))


def get_bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "si", "sí")


def get_list_env(name: str, default: list[str]) -> list[str]:
    """Lee una lista separada por comas (p. ej. CORS_ORIGINS)."""
    value = os.getenv(name)
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]
