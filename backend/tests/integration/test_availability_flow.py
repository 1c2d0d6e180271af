# backend/tests/integration/test_availability_flow.py
"""
Integration tests: AvailabilityService over a real SQLite database.

Exercises create/get/update end to end plus the transactional guarantees
of create and replace as seen from a second connection.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from app.core.enums import AccountRole, AvailabilityRole
from app.core.exceptions import AvailabilityStorageException
from app.database import Base
from app.database.engines import build_engine
from app.models import Organization, User
from app.principal import CurrentUser
from app.repositories.availability_repository import AvailabilityRepository
from app.services.availability_service import AvailabilityService
from app.utils.intervals import TimeInterval, to_blocks


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 1, 6, hour, minute, tzinfo=timezone.utc)


class TestAvailabilityLifecycle:
    def test_create_then_get_returns_the_merged_range(self, db, tutor_user, principal_for):
        service = AvailabilityService(db)
        actor = principal_for(tutor_user)

        service.create_availability(tutor_user.id, [[at(9), at(10)]], actor=actor)
        result = service.get_availability(tutor_user.id, actor=actor)

        assert result.intervals == [TimeInterval(at(9), at(10))]

    def test_repeated_create_is_idempotent(self, db, tutor_user, principal_for):
        service = AvailabilityService(db)
        actor = principal_for(tutor_user)

        service.create_availability(tutor_user.id, [[at(9), at(10)]], actor=actor)
        service.create_availability(tutor_user.id, [[at(9, 30), at(10, 30)]], actor=actor)

        assert service.repository.count(user_id=tutor_user.id) == 6
        assert service.get_availability(tutor_user.id, actor=actor).intervals == [
            TimeInterval(at(9), at(10, 30))
        ]

    def test_update_subtracts_and_merges(self, db, tutor_user, principal_for):
        service = AvailabilityService(db)
        actor = principal_for(tutor_user)
        service.create_availability(tutor_user.id, [[at(9), at(10)]], actor=actor)

        after_remove = service.update_availability(
            tutor_user.id, add=None, remove=[[at(9, 15), at(9, 45)]], actor=actor
        )
        assert after_remove.intervals == [
            TimeInterval(at(9), at(9, 15)),
            TimeInterval(at(9, 45), at(10)),
        ]

        after_add = service.update_availability(
            tutor_user.id, add=[[at(9, 15), at(9, 45)], [at(10), at(10, 30)]], remove=None, actor=actor
        )
        assert after_add.intervals == [TimeInterval(at(9), at(10, 30))]
        assert service.get_availability(tutor_user.id, actor=actor).intervals == [
            TimeInterval(at(9), at(10, 30))
        ]
        assert service.repository.count(user_id=tutor_user.id) == 6

    def test_admin_acts_for_student_with_student_tag(
        self, db, admin_user, student_user, principal_for
    ):
        service = AvailabilityService(db)

        service.create_availability(
            student_user.id, [[at(15), at(15, 30)]], actor=principal_for(admin_user)
        )

        rows = service.repository.select_blocks(student_user.id)
        assert {r.role for r in rows} == {"student"}
        assert {r.org_id for r in rows} == {student_user.org_id}

    def test_batch_reads_each_user(self, db, admin_user, tutor_user, student_user, principal_for):
        service = AvailabilityService(db)
        service.create_availability(
            tutor_user.id, [[at(9), at(10)]], actor=principal_for(tutor_user)
        )

        result = service.get_batch_availability(
            [student_user.id, tutor_user.id], actor=principal_for(admin_user)
        )

        assert [(r.user_id, r.intervals) for r in result] == [
            (student_user.id, []),
            (tutor_user.id, [TimeInterval(at(9), at(10))]),
        ]


class TestCreateAtomicity:
    def test_failure_on_a_later_chunk_leaves_nothing_stored(
        self, db, tutor_user, principal_for, monkeypatch
    ):
        repository = AvailabilityRepository(db, batch_size=2)
        service = AvailabilityService(db, repository=repository)
        original_execute = db.execute
        calls = {"count": 0}

        def failing_execute(statement, *args, **kwargs):
            calls["count"] += 1
            if calls["count"] == 2:
                raise OperationalError("INSERT INTO availability", {}, Exception("disk I/O error"))
            return original_execute(statement, *args, **kwargs)

        monkeypatch.setattr(db, "execute", failing_execute)

        with pytest.raises(AvailabilityStorageException):
            service.create_availability(
                tutor_user.id, [[at(9), at(10)]], actor=principal_for(tutor_user)
            )

        monkeypatch.undo()
        assert calls["count"] == 2
        assert repository.count(user_id=tutor_user.id) == 0


class TestReplaceAtomicity:
    @pytest.fixture
    def file_engine(self, tmp_path):
        engine = build_engine(f"sqlite:///{tmp_path / 'availability.db'}")
        Base.metadata.create_all(engine)
        yield engine
        engine.dispose()

    def test_reader_sees_old_set_until_replace_commits(self, file_engine):
        Session = sessionmaker(bind=file_engine, autoflush=False, expire_on_commit=False)

        writer = Session()
        org = Organization(name="Atomic Academy")
        writer.add(org)
        writer.flush()
        user = User(org_id=org.id, role="tutor", first_name="Rita", last_name="Reader")
        writer.add(user)
        writer.commit()
        actor = CurrentUser(user_id=user.id, org_id=org.id, role=AccountRole.TUTOR)

        AvailabilityService(writer).create_availability(user.id, [[at(9), at(10)]], actor=actor)

        # Replace is flushed on the writer's connection but not committed
        AvailabilityRepository(writer).replace_blocks(
            user.id, org.id, AvailabilityRole.TUTOR, to_blocks([[at(14), at(15)]])
        )

        reader = Session()
        try:
            during = AvailabilityService(reader).get_availability(user.id, actor=actor)
        finally:
            reader.close()
        assert during.intervals == [TimeInterval(at(9), at(10))]

        writer.commit()
        writer.close()

        reader = Session()
        try:
            after = AvailabilityService(reader).get_availability(user.id, actor=actor)
        finally:
            reader.close()
        assert after.intervals == [TimeInterval(at(14), at(15))]
