from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from habit_hub.models.habit import HabitReport
from habit_hub.services import habit_service
from habit_hub.services.habit_store import EntityNotFoundError, HabitStore, HabitStoreError


def test_create_and_list_habits(store, make_habit):
    make_habit(name="Read", type="number", goal="20 pages")
    make_habit(name="Meditate", type="duration", goal="10")
    assert [h.name for h in store.list_habits()] == ["Read", "Meditate"]


def test_habits_are_scoped_to_user(db_session, store, make_habit):
    habit = make_habit()
    other = HabitStore(db_session, "someone-else")
    assert other.list_habits() == []
    assert other.get_habit(habit.id) is None
    with pytest.raises(EntityNotFoundError):
        other.delete_habit(habit.id)


def test_update_habit_skips_none(store, make_habit):
    habit = make_habit(description="before")
    store.update_habit(habit.id, {"name": "Hydrate", "description": None})
    refreshed = store.require_habit(habit.id)
    assert refreshed.name == "Hydrate"
    assert refreshed.description == "before"


def test_reports_are_stamped_by_server(store, make_habit):
    habit = make_habit()
    before = datetime.now(timezone.utc)
    store.append_report(habit.id, {"kind": "number", "value": 2.0})
    rows = store.list_reports(habit.id, since=before - timedelta(seconds=1))
    assert len(rows) == 1
    assert rows[0].value == {"kind": "number", "value": 2.0}
    assert store.last_report_at(habit.id) >= before - timedelta(seconds=1)


def test_append_report_to_missing_habit(store):
    with pytest.raises(EntityNotFoundError):
        store.append_report("missing", {"kind": "boolean", "value": True})


def test_delete_habit_removes_reports(db_session, store, make_habit):
    habit = make_habit()
    store.append_report(habit.id, {"kind": "number", "value": 1.0})
    store.delete_habit(habit.id)
    assert db_session.query(HabitReport).count() == 0


def test_reset_current_period_deletes_only_current_reports(db_session, store, make_habit):
    habit = make_habit(frequency="daily")
    old = HabitReport(
        habit_id=habit.id,
        user_id="test-user",
        value={"kind": "number", "value": 5.0},
        reported_at=datetime.now(timezone.utc) - timedelta(days=3),
    )
    db_session.add(old)
    db_session.commit()
    store.append_report(habit.id, {"kind": "number", "value": 1.0})
    store.append_report(habit.id, {"kind": "number", "value": 2.0})

    assert habit_service.reset_current_period(store, habit.id) == 2
    assert habit_service.get_habit_with_progress(store, habit.id).progress == 0
    assert db_session.query(HabitReport).count() == 1


def test_deleting_category_leaves_habits_uncategorized(store, make_habit):
    category_id = store.create_category("Health")
    habit = make_habit(category_id=category_id)
    assert habit_service.get_habit_with_progress(store, habit.id).category_name == "Health"

    store.delete_category(category_id)
    view = habit_service.get_habit_with_progress(store, habit.id)
    assert view.category_id == category_id
    assert view.category_name is None


def test_update_and_list_categories(store):
    category_id = store.create_category("Work")
    store.create_category("Health")
    store.update_category(category_id, "Career")
    assert [c.name for c in store.list_categories()] == ["Career", "Health"]
    with pytest.raises(EntityNotFoundError):
        store.update_category("missing", "x")


def test_report_months_newest_first(db_session, store, make_habit):
    habit = make_habit()
    for when in (datetime(2024, 3, 10, 15, tzinfo=timezone.utc), datetime(2024, 5, 2, 15, tzinfo=timezone.utc)):
        db_session.add(HabitReport(habit_id=habit.id, user_id="test-user", value=None, reported_at=when))
    db_session.commit()
    assert store.report_months() == ["2024-05", "2024-03"]


def test_database_errors_become_store_errors(store, monkeypatch):
    def broken_query(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("permission denied for table habit"))

    monkeypatch.setattr(store.db, "query", broken_query)
    with pytest.raises(HabitStoreError) as exc_info:
        store.list_habits()
    assert exc_info.value.permission_denied is True
    assert exc_info.value.action == "load habits"


def test_future_dated_report_counts_toward_current_period(db_session, store, make_habit):
    habit = make_habit(type="number", goal="5")
    db_session.add(HabitReport(
        habit_id=habit.id,
        user_id="test-user",
        value={"kind": "number", "value": 5.0},
        reported_at=datetime.now(timezone.utc) + timedelta(days=2),
    ))
    db_session.commit()

    view = habit_service.get_habit_with_progress(store, habit.id)
    assert view.progress == 5.0
    assert view.completed is True


def test_type_change_to_duration_normalizes_stored_goal(store, make_habit):
    habit = make_habit(type="number", goal="1h 30m")
    habit_service.update_habit(store, habit.id, {"type": "duration"})
    assert store.require_habit(habit.id).goal == "90"
    assert habit_service.get_habit_with_progress(store, habit.id).target == 90
