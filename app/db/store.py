"""
app/db/store.py

Purpose: Keyed document store used by the workflow

- get / update / create / find by collection name and document `id`
- Mongo implementation over Motor
- Store faults surface as PersistenceFailureError
"""

import uuid
from typing import Any, Dict, List, Optional, Protocol, Union

from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import PyMongoError

from app.core.exceptions import PersistenceFailureError
from app.core.logging import get_logger
from app.db.mongo import get_collection

logger = get_logger(__name__)

Document = Dict[str, Any]

# Mongo's own key never leaves the store
_PROJECTION = {"_id": 0}


class DocumentStore(Protocol):
    async def get(self, collection: str, id: Optional[str] = None) -> Union[Document, List[Document], None]:
        ...

    async def update(
        self,
        collection: str,
        id: str,
        document: Document,
        expected_status: Optional[str] = None,
    ) -> Optional[Document]:
        ...

    async def create(self, collection: str, document: Document) -> Document:
        ...

    async def find(self, collection: str, filter: Document) -> List[Document]:
        ...


class MongoDocumentStore:
    """
    DocumentStore backed by MongoDB.

    `update` is a full replace. With `expected_status` it only matches while
    the stored document still has that status, which makes a status
    transition a compare-and-swap: a racing second writer matches nothing
    and gets None back.
    """

    async def get(self, collection: str, id: Optional[str] = None) -> Union[Document, List[Document], None]:
        try:
            coll = get_collection(collection)
            if id is None:
                cursor = coll.find({}, _PROJECTION).sort("requestDate", DESCENDING)
                return await cursor.to_list(length=None)
            return await coll.find_one({"id": id}, _PROJECTION)
        except PyMongoError as e:
            logger.error(f"Failed to read {collection}/{id or '*'}: {e}", exc_info=True)
            raise PersistenceFailureError(f"Failed to read from {collection}") from e

    async def update(
        self,
        collection: str,
        id: str,
        document: Document,
        expected_status: Optional[str] = None,
    ) -> Optional[Document]:
        query: Document = {"id": id}
        if expected_status is not None:
            query["status"] = expected_status

        replacement = {key: value for key, value in document.items() if key != "_id"}
        replacement["id"] = id

        try:
            return await get_collection(collection).find_one_and_replace(
                query,
                replacement,
                projection=_PROJECTION,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error(f"Failed to update {collection}/{id}: {e}", exc_info=True)
            raise PersistenceFailureError(f"Failed to update {collection}/{id}") from e

    async def create(self, collection: str, document: Document) -> Document:
        new_document = dict(document)
        new_document.setdefault("id", uuid.uuid4().hex)

        try:
            # insert_one adds `_id` to the dict it is given
            await get_collection(collection).insert_one(dict(new_document))
        except PyMongoError as e:
            logger.error(f"Failed to create document in {collection}: {e}", exc_info=True)
            raise PersistenceFailureError(f"Failed to create document in {collection}") from e

        return new_document

    async def find(self, collection: str, filter: Document) -> List[Document]:
        try:
            cursor = get_collection(collection).find(filter, _PROJECTION)
            return await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Failed to query {collection}: {e}", exc_info=True)
            raise PersistenceFailureError(f"Failed to query {collection}") from e
