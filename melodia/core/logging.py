"""
Melodia Logging Configuration
Structured logging setup with file rotation and status reconciliation tracing
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Optional

import structlog
from pythonjsonlogger import jsonlogger

from .config import get_settings

settings = get_settings()


def setup_logging() -> logging.Logger:
    """Set up structured logging for Melodia"""

    log_dir = Path(settings.LOG_FILE_PATH).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper()),
        format=settings.LOG_FORMAT,
        handlers=[]  # Will be set below
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)

    if settings.is_development:
        console_formatter = logging.Formatter(
            '\033[92m%(asctime)s\033[0m - '
            '\033[94m%(name)s\033[0m - '
            '\033[%(levelno)s;1m%(levelname)s\033[0m - '
            '%(message)s',
            datefmt='%H:%M:%S'
        )
    else:
        console_formatter = jsonlogger.JsonFormatter(
            '%(asctime)s %(name)s %(levelname)s %(message)s'
        )

    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    file_handler = logging.handlers.RotatingFileHandler(
        settings.LOG_FILE_PATH,
        maxBytes=settings.LOG_MAX_SIZE,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding='utf-8'
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(jsonlogger.JsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(pathname)s %(lineno)d %(funcName)s %(message)s'
    ))
    root_logger.addHandler(file_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if not settings.is_development
            else structlog.dev.ConsoleRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Adjust third-party library log levels
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("fastapi").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.getLogger("melodia.status").setLevel(logging.DEBUG)
    logging.getLogger("melodia.performance").setLevel(logging.INFO)

    logger = logging.getLogger("melodia")
    logger.info(f"Logging configured - Level: {settings.LOG_LEVEL}")

    return logger


class SongStatusLogger:
    """Specialized logger for song status reconciliation"""

    def __init__(self):
        self.logger = structlog.get_logger("melodia.status")

    def log_status_calculated(
        self,
        song_status: str,
        variants_count: int,
        has_any_stream_ready: bool,
        has_any_download_ready: bool,
        all_download_ready: bool,
        **kwargs: Any
    ) -> None:
        self.logger.debug(
            "Song status calculated",
            song_status=song_status,
            variants_count=variants_count,
            has_any_stream_ready=has_any_stream_ready,
            has_any_download_ready=has_any_download_ready,
            all_download_ready=all_download_ready,
            **kwargs
        )

    def log_database_first(
        self,
        song_id: int,
        database_status: str,
        calculated_status: str,
        should_return: bool,
        variants_count: int
    ) -> None:
        """Log the database-first comparison between stored and recalculated status"""
        self.logger.info(
            "Database-first status check",
            song_id=song_id,
            database_status=database_status,
            calculated_status=calculated_status,
            should_return=should_return,
            variants_count=variants_count
        )

    def log_mode_handled(
        self,
        mode: str,
        song_id: int,
        calculated_status: str,
        database_status: Optional[str],
        variants_count: int,
        **kwargs: Any
    ) -> None:
        """Log completion of a demo or production status cycle"""
        self.logger.info(
            "Mode handler completed",
            mode=mode,
            song_id=song_id,
            calculated_status=calculated_status,
            database_status=database_status,
            variants_count=variants_count,
            **kwargs
        )

    def log_refresh_scheduled(self, song_id: int, mode: str) -> None:
        self.logger.info("Background refresh scheduled", song_id=song_id, mode=mode)

    def log_refresh_completed(self, song_id: int, mode: str, duration_ms: float) -> None:
        self.logger.info(
            "Background refresh completed",
            song_id=song_id,
            mode=mode,
            duration_ms=duration_ms
        )

    def log_refresh_failed(self, song_id: int, mode: str, error: str) -> None:
        self.logger.error(
            "Background refresh failed",
            song_id=song_id,
            mode=mode,
            error=error
        )

    def log_database_update_failed(
        self,
        song_id: int,
        error: str,
        attempt: Optional[int] = None,
        job_error_message: Optional[str] = None
    ) -> None:
        self.logger.error(
            "Song database update failed",
            song_id=song_id,
            error=error,
            attempt=attempt,
            job_error_message=job_error_message
        )

    def log_job_error(self, song_id: int, task_id: str, code: int, message: str) -> None:
        """Log an error reported by the generation job API"""
        self.logger.warning(
            "Generation job reported an error",
            song_id=song_id,
            task_id=task_id,
            code=code,
            message=message
        )


class PerformanceLogger:
    """Logger for performance monitoring"""

    def __init__(self):
        self.logger = structlog.get_logger("melodia.performance")

    def log_external_call(
        self,
        service: str,
        operation: str,
        duration_ms: float,
        status_code: Optional[int] = None
    ) -> None:
        """Log an outbound HTTP call"""
        self.logger.debug(
            "External call",
            service=service,
            operation=operation,
            duration_ms=duration_ms,
            status_code=status_code
        )

    def log_database_query(
        self,
        query: str,
        duration_ms: float,
        rows_affected: int = None
    ) -> None:
        """Log database query performance"""
        self.logger.debug(
            "Database query",
            query=query[:100] + "..." if len(query) > 100 else query,
            duration_ms=duration_ms,
            rows_affected=rows_affected
        )


# Create global logger instances
status_logger = SongStatusLogger()
performance_logger = PerformanceLogger()

__all__ = [
    "setup_logging",
    "SongStatusLogger",
    "PerformanceLogger",
    "status_logger",
    "performance_logger"
]
