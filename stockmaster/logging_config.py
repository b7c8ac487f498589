"""
Configuración de logging para la aplicación.
Siempre escribe en consola; si LOG_DIR está definido, además escribe en
stockmaster.log, que rota a medianoche y conserva los últimos 30 días.
"""
import logging
import os
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DIAS_CONSERVADOS = 30


def setup_logging():
    """Configura el logger raíz y los loggers de la aplicación."""
    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Eliminar handlers existentes para evitar duplicados (uvicorn --reload)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_dir = os.getenv("LOG_DIR")
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        # Los archivos rotados llevan sufijo .YYYY-MM-DD
        file_handler = TimedRotatingFileHandler(
            Path(log_dir) / "stockmaster.log",
            when="midnight",
            backupCount=DIAS_CONSERVADOS,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    logging.getLogger("stockmaster").setLevel(level)

    # Solo warnings y errores de SQL
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("stockmaster").info("Logging configurado (nivel %s)", logging.getLevelName(level))
