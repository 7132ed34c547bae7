"""Tests for submission stores."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.orm import sessionmaker

from gallery_layout.db.base import Base, create_db_engine, init_db, normalize_database_url
from gallery_layout.db.models import Submission, SubmissionStatus
from gallery_layout.db.store import (
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    InMemorySubmissionStore,
    SqlSubmissionStore,
    submission_aspect_ratio,
)
from gallery_layout.engine.data_models import Item
from gallery_layout.engine.errors import ItemLookupError


@pytest.fixture(scope="function")
def session_factory():
    """Session factory over a thread-safe in-memory SQLite database."""
    engine = create_db_engine("sqlite:///:memory:")
    init_db(engine)
    TestSession = sessionmaker(bind=engine)
    yield TestSession
    Base.metadata.drop_all(bind=engine)


def add_submissions(session_factory, *submissions):
    with session_factory() as db:
        db.add_all(submissions)
        db.commit()


class TestSubmissionModel:
    """Tests for the Submission read model."""

    def test_has_dimension_data(self):
        assert Submission(image_width=800, image_height=600).has_dimension_data
        assert not Submission(image_width=800, image_height=None).has_dimension_data
        assert not Submission(image_width=0, image_height=600).has_dimension_data

    def test_default_status(self, session_factory):
        add_submissions(session_factory, Submission(issue_id=1))
        with session_factory() as db:
            assert db.query(Submission).one().status == SubmissionStatus.PENDING


class TestAspectRatio:
    """Tests for submission_aspect_ratio."""

    def test_stored_ratio_wins(self):
        s = Submission(id=1, aspect_ratio=1.5, image_width=100, image_height=100)
        assert submission_aspect_ratio(s) == 1.5

    def test_ratio_from_dimensions(self):
        s = Submission(id=1, image_width=1600, image_height=900)
        assert submission_aspect_ratio(s) == pytest.approx(16 / 9)

    def test_default_dimensions(self):
        s = Submission(id=1)
        assert submission_aspect_ratio(s) == DEFAULT_WIDTH / DEFAULT_HEIGHT


class TestSqlSubmissionStore:
    """Tests for SqlSubmissionStore."""

    def test_lists_visible_submissions_in_arrival_order(self, session_factory):
        t0 = datetime(2024, 3, 1, 12, 0)
        add_submissions(
            session_factory,
            Submission(id=10, issue_id=1, status=SubmissionStatus.APPROVED,
                       image_width=1600, image_height=900, submitted_at=t0 + timedelta(minutes=2)),
            Submission(id=11, issue_id=1, status=SubmissionStatus.PENDING,
                       aspect_ratio=1.0, submitted_at=t0),
            Submission(id=12, issue_id=1, status=SubmissionStatus.SELECTED,
                       aspect_ratio=0.75, submitted_at=t0),
            Submission(id=13, issue_id=1, status=SubmissionStatus.APPROVED,
                       submitted_at=t0 + timedelta(minutes=5)),
            Submission(id=14, issue_id=1, status=SubmissionStatus.REJECTED,
                       aspect_ratio=1.0, submitted_at=t0),
            Submission(id=15, issue_id=2, status=SubmissionStatus.APPROVED,
                       aspect_ratio=1.0, submitted_at=t0),
        )

        items = SqlSubmissionStore(session_factory).list_items(1)

        assert [item.id for item in items] == [12, 10, 13]
        assert items[0].aspect_ratio == 0.75
        assert items[1].aspect_ratio == pytest.approx(16 / 9)
        assert items[2].aspect_ratio == pytest.approx(800 / 600)

    def test_unknown_issue(self, session_factory):
        assert SqlSubmissionStore(session_factory).list_items(99) == []

    def test_database_error_wrapped(self):
        """A missing table surfaces as ItemLookupError, not a raw SQLAlchemy error."""
        engine = create_db_engine("sqlite:///:memory:")
        store = SqlSubmissionStore(sessionmaker(bind=engine))

        with pytest.raises(ItemLookupError) as exc_info:
            store.list_items(1)
        assert exc_info.value.item_set_id == 1


class TestEngineSetup:
    """Tests for database URL handling."""

    def test_postgres_scheme_normalized(self):
        assert normalize_database_url("postgres://u@h/db") == "postgresql://u@h/db"
        assert normalize_database_url("sqlite:///x.db") == "sqlite:///x.db"

    def test_memory_database_shared_across_sessions(self):
        engine = create_db_engine("sqlite:///:memory:")
        init_db(engine)
        factory = sessionmaker(bind=engine)

        add_submissions(factory, Submission(issue_id=3, status=SubmissionStatus.APPROVED, aspect_ratio=1.0))

        assert len(SqlSubmissionStore(factory).list_items(3)) == 1


class TestInMemorySubmissionStore:
    """Tests for InMemorySubmissionStore."""

    def test_put_and_list(self):
        store = InMemorySubmissionStore({1: [Item(id="a", aspect_ratio=1.0)]})
        store.put(2, [Item(id="b", aspect_ratio=2.0)])

        assert store.list_items(1) == [Item(id="a", aspect_ratio=1.0)]
        assert [item.id for item in store.list_items(2)] == ["b"]
        assert store.list_items(3) == []

    def test_returns_copies(self):
        store = InMemorySubmissionStore({1: [Item(id="a", aspect_ratio=1.0)]})
        store.list_items(1).clear()
        assert len(store.list_items(1)) == 1
