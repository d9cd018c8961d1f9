import threading
from datetime import date

import pytest
from sqlalchemy import create_engine, select

from mobile_clinic.core.errors import DuplicateQueueEntry
from mobile_clinic.db.session import make_session_factory
from mobile_clinic.models import Base
from mobile_clinic.models.location import Location
from mobile_clinic.models.patient import Patient
from mobile_clinic.models.visit import Visit
from mobile_clinic.services import visits as visits_service


@pytest.fixture
def file_engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'clinic.db'}",
        connect_args={"check_same_thread": False, "timeout": 10},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


def test_concurrent_sessions_store_one_visit_per_key(file_engine, monkeypatch):
    session_factory = make_session_factory(file_engine)
    with session_factory() as db:
        location = Location(name="Poipet", is_active=True)
        db.add(location)
        db.flush()
        patient = Patient(english_name="Sokha", location_id=location.id)
        db.add(patient)
        db.commit()
        location_id, patient_id = location.id, patient.id

    # Both sessions finish their lookup before either inserts.
    barrier = threading.Barrier(2, timeout=10)
    real_find_visit = visits_service.find_visit

    def find_then_wait(db, **key):
        found = real_find_visit(db, **key)
        barrier.wait()
        return found

    monkeypatch.setattr(visits_service, "find_visit", find_then_wait)

    outcomes = []

    def worker():
        db = session_factory()
        try:
            visits_service.resolve_visit(
                db,
                patient_id=patient_id,
                location_id=location_id,
                raw_queue_no="4a",
                visit_date=date(2026, 4, 2),
            )
            db.commit()
            outcomes.append("created")
        except DuplicateQueueEntry:
            outcomes.append("duplicate")
        except Exception as exc:
            outcomes.append(repr(exc))
        finally:
            db.close()

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert sorted(outcomes) == ["created", "duplicate"]
    with session_factory() as db:
        stored = db.scalars(select(Visit)).all()
        assert len(stored) == 1
        assert stored[0].queue_no == "4A"
