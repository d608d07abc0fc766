import logging
import os
import sys
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path

_CONFIGURED = False
_ROOT = Path(__file__).resolve().parents[1]


def resolve_logs_dir() -> Path:
    """
    LOGS_DIR resolution:
    - absolute path -> use as-is
    - relative path -> resolve from the project root
    - unset -> <system temp>/logs
    """
    env = os.getenv("LOGS_DIR", "").strip()
    if env:
        p = Path(env)
        return p if p.is_absolute() else (_ROOT / p)
    return Path(tempfile.gettempdir()) / "logs"


def setup_logging(log_dir: Path, level: int = logging.INFO) -> logging.Logger:
    global _CONFIGURED
    logger = logging.getLogger()
    if _CONFIGURED:
        return logger

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    logger.setLevel(level)

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
    )
    simple_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(simple_formatter)

    file_handler = RotatingFileHandler(
        log_dir / 'whiteboard.log',
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5,
        encoding='utf-8',
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(detailed_formatter)

    logger.addHandler(console_handler)
    logger.addHandler(file_handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)

    _CONFIGURED = True
    return logger
