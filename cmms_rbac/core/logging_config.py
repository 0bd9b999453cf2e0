import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from datetime import datetime

from cmms_rbac.core.config import settings

# Nivel de logging (Leer de config o default)
LOG_LEVEL = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

# Formato de los logs
LOG_FORMAT = "%(asctime)s.%(msecs)03d [%(levelname)-8s] [%(name)s] [%(process)d:%(threadName)s] [%(filename)s:%(lineno)d] - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)


def _build_file_handler() -> TimedRotatingFileHandler:
    """Handler para archivo rotativo diario. Crea el directorio de logs si no existe."""
    logs_dir = Path(settings.LOGS_DIRECTORY)
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_filename = logs_dir / f"cmms_rbac_{datetime.now().strftime('%Y%m%d')}.log"
    file_handler = TimedRotatingFileHandler(
        filename=log_filename,
        when="midnight",
        interval=1,
        backupCount=14, # Guardar logs de las últimas 2 semanas
        encoding='utf-8',
        delay=True
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(LOG_LEVEL)
    return file_handler


def setup_logging(log_to_file: bool = settings.LOG_TO_FILE) -> None:
    """Configura los manejadores y el nivel para el logger raíz y loggers específicos."""
    root_logger = logging.getLogger()
    root_logger.setLevel(LOG_LEVEL)
    # Limpiar handlers existentes para evitar duplicados si se llama dos veces
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(LOG_LEVEL)
    root_logger.addHandler(console_handler)

    if log_to_file:
        root_logger.addHandler(_build_file_handler())

    # El cliente HTTP es muy verboso en INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    root_logger.info("="*50)
    root_logger.info("Configuración de Logging Iniciada")
    root_logger.info(f"Nivel de Log: {logging.getLevelName(LOG_LEVEL)}")
    root_logger.info(f"Log a archivo: {'sí' if log_to_file else 'no'} ({settings.LOGS_DIRECTORY})")
    root_logger.info("="*50)
