"""
Logging setup for the credential service.
"""
import logging
import os
import sys

from ..config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_FILE_NAME = "credential_service.log"


def configure_logging(settings: Settings) -> None:
    """
    Log to stdout, and to LOG_DIR/credential_service.log when LOG_DIR is set.

    A log directory that cannot be created is reported on stderr and
    logging continues on stdout only.
    """
    handlers = [logging.StreamHandler(sys.stdout)]

    if settings.LOG_DIR:
        try:
            os.makedirs(settings.LOG_DIR, exist_ok=True)
            handlers.append(logging.FileHandler(os.path.join(settings.LOG_DIR, LOG_FILE_NAME)))
        except OSError as e:
            print(f"WARNING: Could not set up file logging: {e}", file=sys.stderr)

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )
