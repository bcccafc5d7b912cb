import logging
from woodzire.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

def configure_logging(level: str = None):
    logging.basicConfig(level=(level or settings.LOG_LEVEL).upper(), format=LOG_FORMAT)
    # quieten per-request noise from the HTTP client used by notify
    logging.getLogger("urllib3").setLevel(logging.WARNING)
