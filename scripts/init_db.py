"""
Database initialization script

Run once to create the admin console collections' indexes:
    python scripts/init_db.py

Optionally seed a pending request for local testing:
    python scripts/init_db.py --seed
"""

import asyncio
import sys
from pathlib import Path
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
load_dotenv()

import logging

from app.core.config import settings
from app.db.indexes import create_indexes
from app.db.mongo import connect_to_mongo, close_mongo_connection
from app.db.store import MongoDocumentStore
from app.flow.states import RequestStatus
from utils.time_utils import epoch_millis, utc_now

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


def sample_request() -> dict:
    return {
        "id": str(epoch_millis()),
        "name": "Test Requester",
        "email": "requester@example.com",
        "phoneNo": "9876543210",
        "organization": "Bonstay Hotels",
        "position": "Operations Lead",
        "department": "Operations",
        "reason": "Local testing of the approval flow",
        "requestDate": utc_now(),
        "status": RequestStatus.PENDING.value,
        "adminCode": None,
        "approvedBy": None,
        "approvedDate": None,
    }


async def main(seed: bool):
    logger.info(f"🔌 Connecting to MongoDB: {settings.MONGODB_DB_NAME}")
    await connect_to_mongo()

    try:
        await create_indexes()

        if seed:
            document = await MongoDocumentStore().create(
                settings.ADMIN_CODE_REQUESTS_COLLECTION, sample_request()
            )
            logger.info(f"🌱 Seeded pending request {document['id']}")

        logger.info("✅ Database initialized")
    finally:
        await close_mongo_connection()


if __name__ == "__main__":
    asyncio.run(main(seed="--seed" in sys.argv[1:]))
