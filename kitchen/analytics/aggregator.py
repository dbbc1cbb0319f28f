from __future__ import annotations

import re
from dataclasses import dataclass

from ..store.base import FeedbackStore
from ..store.models import FeedbackRecord

_OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


class InvalidScopeIdentifier(ValueError):
    """A malformed customer or food item id was passed to per-entity analytics."""


def validate_identifier(value: str, kind: str) -> str:
    if not isinstance(value, str) or not _OBJECT_ID_RE.match(value):
        raise InvalidScopeIdentifier(f"Invalid {kind} ID")
    return value


@dataclass(frozen=True)
class FeedbackScope:
    user_id: str | None = None
    food_item_id: str | None = None

    @classmethod
    def for_user(cls, user_id: str) -> FeedbackScope:
        return cls(user_id=user_id)

    @classmethod
    def for_item(cls, food_item_id: str) -> FeedbackScope:
        return cls(food_item_id=food_item_id)

    @classmethod
    def everything(cls) -> FeedbackScope:
        return cls()

    @property
    def key(self) -> str:
        return self.user_id or self.food_item_id or "all"


class FeedbackAggregator:
    def __init__(self, store: FeedbackStore) -> None:
        self.store = store

    def collect(self, scope: FeedbackScope) -> list[FeedbackRecord]:
        """Return the scope's feedback, oldest first, with item names attached.

        An empty list means no feedback. Identifiers are checked before the
        store is touched; store failures propagate unchanged.
        """
        if scope.user_id is not None:
            validate_identifier(scope.user_id, "customer")
        if scope.food_item_id is not None:
            validate_identifier(scope.food_item_id, "food item")

        records = self.store.query_feedback(user_id=scope.user_id, food_item_id=scope.food_item_id)

        if scope.user_id is not None:
            records = [r for r in records if r.user_id == scope.user_id]

        return sorted(records, key=lambda r: r.created_at)
