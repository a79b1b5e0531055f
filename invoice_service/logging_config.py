"""
Logging setup shared by the API process and the consumer process
"""
import logging
from typing import Optional

from invoice_service.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging once from LOG_LEVEL"""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
    # pika is very chatty at INFO
    logging.getLogger("pika").setLevel(logging.WARNING)
