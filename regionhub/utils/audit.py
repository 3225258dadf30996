# regionhub/utils/audit.py
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from regionhub.models.log import Log

logger = logging.getLogger(__name__)


def write_log(db: Session, *, user_id, action, resource, resource_id=None, status="SUCCESS", ip=None, meta=None):
    """Persist one audit row in its own commit, after the business change."""
    entry = Log(user_id=user_id, action=action, resource=resource, resource_id=resource_id,
                status=status, ip=ip, meta=meta or {})
    db.add(entry)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not write audit log %s/%s", action, resource)
        raise
    logger.debug("audit %s %s#%s user=%s %s", action, resource, resource_id, user_id, status)


def client_ip(request):
    return request.client.host if request and request.client else None
