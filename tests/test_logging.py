"""
Tests de la configuración de logging.
"""
import logging
from logging.handlers import TimedRotatingFileHandler

import pytest

from stockmaster.logging_config import setup_logging


@pytest.fixture
def raiz():
    """Restaura los handlers del logger raíz al terminar."""
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level
    yield root_logger
    for handler in root_logger.handlers:
        if handler not in handlers:
            handler.close()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


def test_archivo_rota_a_medianoche(raiz, tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    setup_logging()

    archivos = [h for h in raiz.handlers if isinstance(h, TimedRotatingFileHandler)]
    assert len(archivos) == 1
    assert archivos[0].when == "MIDNIGHT"
    assert archivos[0].backupCount == 30
    assert archivos[0].baseFilename == str(tmp_path / "logs" / "stockmaster.log")

    logging.getLogger("stockmaster.test").info("hola")
    archivos[0].flush()
    assert "hola" in (tmp_path / "logs" / "stockmaster.log").read_text(encoding="utf-8")


def test_sin_log_dir_solo_consola(raiz, monkeypatch):
    monkeypatch.delenv("LOG_DIR", raising=False)

    setup_logging()

    assert len(raiz.handlers) == 1
    assert not isinstance(raiz.handlers[0], TimedRotatingFileHandler)
