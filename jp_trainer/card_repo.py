"""
MongoDB repository for the card catalogue.

Cards live in the jp_trainer.cards collection, one document per card,
validated by CardEntry from jp_trainer.schemas. MongoCardRegistry adapts
the collection to the CardRegistry port used by the grading service.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from jp_trainer.schemas import CardEntry
from jp_trainer.srs.errors import StoreUnavailable
from jp_trainer.srs.ports import CardRegistry

# Load environment
load_dotenv()

logger = logging.getLogger(__name__)

# Configuration
DB_NAME = "jp_trainer"
COLLECTION_NAME = "cards"

# Global connection pool (reused across requests)
_client: Optional[MongoClient] = None
_collection: Optional[Collection] = None


# ---- Connection Management ----

def get_collection() -> Collection:
    """
    Get a connection to the MongoDB cards collection.

    Uses a persistent connection pool that's reused across requests.

    Returns:
        MongoDB collection object
    """
    global _client, _collection

    if _collection is not None:
        return _collection

    mongo_uri = os.getenv("MONGO_URI")
    if not mongo_uri:
        raise ValueError("MONGO_URI not found in environment variables")

    _client = MongoClient(
        mongo_uri,
        maxPoolSize=10,
        minPoolSize=1,
        maxIdleTimeMS=60000
    )
    _collection = _client[DB_NAME][COLLECTION_NAME]
    return _collection


# ---- Registry ----

class MongoCardRegistry(CardRegistry):
    """
    CardRegistry backed by the cards collection.

    Soft-deleted cards (deleted: true) count as missing.
    """

    def __init__(self, collection: Optional[Collection] = None):
        self._collection = collection

    @property
    def collection(self) -> Collection:
        if self._collection is None:
            self._collection = get_collection()
        return self._collection

    def _find_one(self, query: dict) -> Optional[dict]:
        try:
            return self.collection.find_one(query)
        except PyMongoError as exc:
            logger.exception("MongoDB error looking up %s", query)
            raise StoreUnavailable(f"card lookup failed: {exc}") from exc

    def card_exists(self, card_id: str) -> bool:
        doc = self._find_one({"id": str(card_id), "deleted": {"$ne": True}})
        return doc is not None

    def get_card(self, card_id: str) -> Optional[CardEntry]:
        """
        Get a card by id, including soft-deleted ones.

        Returns:
            CardEntry, or None if no document has this id
        """
        doc = self._find_one({"id": str(card_id)})
        if doc is None:
            return None
        doc.pop("_id", None)
        return CardEntry.model_validate(doc)

    def get_cards_by_type(self, card_type: str, include_deleted: bool = False) -> list[CardEntry]:
        """All cards of one type, in front order."""
        query: dict = {"type": card_type}
        if not include_deleted:
            query["deleted"] = {"$ne": True}
        try:
            docs = list(self.collection.find(query).sort("front", 1))
        except PyMongoError as exc:
            logger.exception("MongoDB error listing %s cards", card_type)
            raise StoreUnavailable(f"card listing failed: {exc}") from exc
        for doc in docs:
            doc.pop("_id", None)
        return [CardEntry.model_validate(doc) for doc in docs]

    def lookup(self, card_id: str) -> Optional[dict]:
        """Plain dict view of a card, for progress exports."""
        card = self.get_card(card_id)
        return card.model_dump() if card is not None else None
