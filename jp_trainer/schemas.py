"""
Pydantic models for the card catalogue.

Both card registries (Postgres cards table and the MongoDB cards
collection) return CardEntry, so callers see one card shape whichever
store backs the catalogue.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from jp_trainer.session.constants import CARD_TYPES


class ExampleSentence(BaseModel):
    """A Japanese example sentence with its meaning."""
    jp: str = Field(..., description="Japanese sentence")
    meaning: Optional[str] = Field(None, description="Translation")
    reading: Optional[str] = Field(None, description="Kana reading")


class KanjiMetadata(BaseModel):
    """Metadata specific to kanji cards."""
    han_viet: Optional[str] = Field(None, alias="hv", description="Sino-Vietnamese reading")
    on: list[str] = Field(default_factory=list, description="On'yomi readings")
    kun: list[str] = Field(default_factory=list, description="Kun'yomi readings")
    stroke_count: Optional[int] = None
    radicals: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class CardEntry(BaseModel):
    """
    A card record.

    Mongo documents keep their id in the `id` field; Mongo's own `_id` is ignored.
    SQL rows carry no kanji metadata or examples, so those stay empty.
    """
    id: str
    type: str = "vocab"
    front: str
    back: Optional[str] = None
    deleted: bool = False
    kanji: Optional[KanjiMetadata] = None
    examples: list[ExampleSentence] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    model_config = ConfigDict(extra="ignore")

    @property
    def is_known_type(self) -> bool:
        return self.type in CARD_TYPES
