import logging
from sqlalchemy.orm import Session


class BaseService:
    """Holds the request-scoped session and a logger named after the concrete service."""

    def __init__(self, db: Session):
        self.db = db
        self._logger = logging.getLogger(f"{type(self).__module__}.{type(self).__name__}")
