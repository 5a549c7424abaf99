import logging
from datetime import datetime
from typing import Any, Dict, Optional

from pymongo.errors import PyMongoError

from greencredits.repositories.audit_repository import AuditRepository

logger = logging.getLogger(__name__)


class AuditService:
    def __init__(self, repo: AuditRepository):
        self.repo = repo

    async def list_logs(self):
        return await self.repo.list()

    async def log_event(self, event: dict):
        await self.repo.create(event)

    async def record(
        self,
        type_: str,
        actor: Dict[str, Any],
        entity: Dict[str, Any],
        message: str,
        meta: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Audit trail is secondary: a failed write is logged, not raised."""
        try:
            await self.log_event({
                "time": datetime.utcnow(),
                "type": type_,
                "actor": actor,
                "entity": entity,
                "message": message,
                "meta": meta or {},
            })
        except PyMongoError:
            logger.exception("audit write failed: %s %s", type_, entity)
