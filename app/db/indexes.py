"""
app/db/indexes.py

Purpose: Database index management

- Unique keys on request id and issued code
- Status filter used by the compare-and-swap update
- Lookups used by the admin dashboard and reconciliation
"""

from pymongo import ASCENDING, DESCENDING, IndexModel

from app.core.logging import get_logger
from app.db.mongo import get_admin_code_requests_collection, get_admin_codes_collection

logger = get_logger(__name__)


REQUEST_INDEXES = [
    IndexModel("id", unique=True, name="request_id_unique"),
    IndexModel([("id", ASCENDING), ("status", ASCENDING)], name="request_id_status_idx"),
    IndexModel([("status", ASCENDING), ("requestDate", DESCENDING)], name="request_status_date_idx"),
]

CODE_INDEXES = [
    IndexModel("id", unique=True, name="admin_code_id_unique"),
    IndexModel("code", unique=True, name="admin_code_unique"),
    IndexModel("requestId", name="admin_code_request_idx"),
]


async def create_indexes():
    """
    Creates all indexes. Idempotent; runs on every startup.
    """
    requests = get_admin_code_requests_collection()
    codes = get_admin_codes_collection()

    try:
        created = await requests.create_indexes(REQUEST_INDEXES)
        logger.debug(f"admin-code-requests indexes: {created}")

        created = await codes.create_indexes(CODE_INDEXES)
        logger.debug(f"admin-codes indexes: {created}")
    except Exception as e:
        logger.error(f"Failed to create indexes: {e}", exc_info=True)
        raise

    logger.info("✅ Database indexes in place")
