"""Submission stores: where the layout service gets an issue's items from."""

import logging
from typing import Callable, Hashable, Iterable, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gallery_layout.db.base import SessionLocal
from gallery_layout.db.models import Submission, SubmissionStatus
from gallery_layout.engine.data_models import Item
from gallery_layout.engine.errors import ItemLookupError

logger = logging.getLogger(__name__)

# Used when a legacy submission has no stored dimensions at all
DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 600

VISIBLE_STATUSES = (SubmissionStatus.APPROVED, SubmissionStatus.SELECTED)


class SubmissionStore(Protocol):
    """Source of the items in an item set, in natural (arrival) order."""

    def list_items(self, item_set_id: Hashable) -> list[Item]:
        ...


class InMemorySubmissionStore:
    """Dict-backed store for development and tests."""

    def __init__(self, item_sets: dict[Hashable, Iterable[Item]] | None = None):
        self._item_sets: dict[Hashable, list[Item]] = {
            key: list(items) for key, items in (item_sets or {}).items()
        }

    def put(self, item_set_id: Hashable, items: Iterable[Item]) -> None:
        self._item_sets[item_set_id] = list(items)

    def list_items(self, item_set_id: Hashable) -> list[Item]:
        return list(self._item_sets.get(item_set_id, []))


def submission_aspect_ratio(submission: Submission) -> float:
    """Stored ratio, else width/height, else the 800x600 default."""
    if submission.aspect_ratio and submission.aspect_ratio > 0:
        return float(submission.aspect_ratio)
    if submission.has_dimension_data:
        return submission.image_width / submission.image_height

    logger.warning(
        f"Submission {submission.id} has no stored dimensions, "
        f"using default {DEFAULT_WIDTH}x{DEFAULT_HEIGHT}"
    )
    return DEFAULT_WIDTH / DEFAULT_HEIGHT


class SqlSubmissionStore:
    """Reads approved submissions of an issue through SQLAlchemy."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def list_items(self, item_set_id: Hashable) -> list[Item]:
        try:
            with self.session_factory() as db:
                submissions = (
                    db.query(Submission)
                    .filter(
                        Submission.issue_id == item_set_id,
                        Submission.status.in_(VISIBLE_STATUSES),
                    )
                    .order_by(Submission.submitted_at, Submission.id)
                    .all()
                )
                items = [Item(id=s.id, aspect_ratio=submission_aspect_ratio(s)) for s in submissions]
        except SQLAlchemyError as e:
            raise ItemLookupError(item_set_id, str(e)) from e

        logger.debug(f"Loaded {len(items)} submissions for issue {item_set_id}")
        return items
