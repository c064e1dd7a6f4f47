"""
Habit Store - user-scoped persistence for habits, categories and reports
"""

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from habit_hub.models.habit import Category, Habit, HabitReport
from habit_hub.services.habit_periods import as_utc, local_timezone

logger = logging.getLogger(__name__)

HABIT_FIELDS = ("name", "description", "type", "frequency", "goal", "icon", "options", "category_id")


class HabitStoreError(Exception):
    """The database could not complete a read or write"""

    def __init__(self, action: str, permission_denied: bool = False):
        super().__init__(f"Could not {action}")
        self.action = action
        self.permission_denied = permission_denied


class EntityNotFoundError(LookupError):
    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"{kind} '{entity_id}' not found")
        self.kind = kind
        self.entity_id = entity_id


class HabitStore:
    """All reads and writes for one user's habits, categories and reports"""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id

    @contextmanager
    def _guard(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            permission_denied = "permission denied" in str(e).lower()
            if permission_denied:
                logger.error(f"Database permission denied while trying to {action} (user {self.user_id}); check role grants")
            else:
                logger.error(f"Failed to {action}: {e}")
            raise HabitStoreError(action, permission_denied=permission_denied) from e

    # ========== HABITS ==========

    def list_habits(self) -> List[Habit]:
        with self._guard("load habits"):
            return (
                self.db.query(Habit)
                .filter(Habit.user_id == self.user_id)
                .order_by(Habit.created_at)
                .all()
            )

    def get_habit(self, habit_id: str) -> Optional[Habit]:
        with self._guard("load habit"):
            return (
                self.db.query(Habit)
                .filter(Habit.id == habit_id, Habit.user_id == self.user_id)
                .first()
            )

    def require_habit(self, habit_id: str) -> Habit:
        habit = self.get_habit(habit_id)
        if habit is None:
            raise EntityNotFoundError("Habit", habit_id)
        return habit

    def create_habit(self, fields: Dict[str, Any]) -> str:
        with self._guard("save habit"):
            habit = Habit(
                user_id=self.user_id,
                **{k: v for k, v in fields.items() if k in HABIT_FIELDS and v is not None}
            )
            self.db.add(habit)
            self.db.commit()
            self.db.refresh(habit)
            logger.info(f"Created habit {habit.id} ('{habit.name}') for user {self.user_id}")
            return habit.id

    def update_habit(self, habit_id: str, fields: Dict[str, Any]) -> None:
        """Partial update; None values are left untouched"""
        habit = self.require_habit(habit_id)
        with self._guard("save habit"):
            for key, value in fields.items():
                if key in HABIT_FIELDS and value is not None:
                    setattr(habit, key, value)
            self.db.commit()
            logger.info(f"Updated habit {habit_id}: {sorted(k for k, v in fields.items() if v is not None)}")

    def delete_habit(self, habit_id: str) -> None:
        habit = self.require_habit(habit_id)
        with self._guard("delete habit"):
            # Reports go with their habit
            self.db.delete(habit)
            self.db.commit()
            logger.info(f"Deleted habit {habit_id}")

    # ========== REPORTS ==========

    def list_reports(
        self,
        habit_id: str,
        since: datetime,
        until: Optional[datetime] = None
    ) -> List[HabitReport]:
        """Reports with reported_at >= since (and <= until when given), oldest first"""
        with self._guard("load reports"):
            query = self.db.query(HabitReport).filter(
                HabitReport.habit_id == habit_id,
                HabitReport.user_id == self.user_id,
                HabitReport.reported_at >= as_utc(since),
            )
            if until is not None:
                query = query.filter(HabitReport.reported_at <= as_utc(until))
            return query.order_by(HabitReport.reported_at).all()

    def append_report(self, habit_id: str, value: Dict[str, Any]) -> str:
        """Append a report; the timestamp is assigned here, never by the caller"""
        self.require_habit(habit_id)
        with self._guard("save report"):
            report = HabitReport(habit_id=habit_id, user_id=self.user_id, value=value)
            self.db.add(report)
            self.db.commit()
            self.db.refresh(report)
            logger.info(f"Appended report {report.id} to habit {habit_id}")
            return report.id

    def delete_reports_since(self, habit_id: str, since: datetime) -> int:
        """Delete every report from `since` on in one transaction"""
        self.require_habit(habit_id)
        with self._guard("reset reports"):
            deleted = (
                self.db.query(HabitReport)
                .filter(
                    HabitReport.habit_id == habit_id,
                    HabitReport.user_id == self.user_id,
                    HabitReport.reported_at >= as_utc(since),
                )
                .delete(synchronize_session=False)
            )
            self.db.commit()
            self.db.expire_all()
            logger.info(f"Deleted {deleted} reports for habit {habit_id} since {since.isoformat()}")
            return deleted

    def last_report_at(self, habit_id: str) -> Optional[datetime]:
        with self._guard("load reports"):
            row = (
                self.db.query(HabitReport.reported_at)
                .filter(HabitReport.habit_id == habit_id, HabitReport.user_id == self.user_id)
                .order_by(HabitReport.reported_at.desc())
                .first()
            )
        return as_utc(row[0]) if row else None

    def report_months(self) -> List[str]:
        """Distinct YYYY-MM months (local time) that have reports, newest first"""
        with self._guard("load report months"):
            rows = (
                self.db.query(HabitReport.reported_at)
                .filter(HabitReport.user_id == self.user_id)
                .all()
            )
        tz = local_timezone()
        months = {as_utc(row[0]).astimezone(tz).strftime("%Y-%m") for row in rows}
        return sorted(months, reverse=True)

    # ========== CATEGORIES ==========

    def list_categories(self) -> List[Category]:
        with self._guard("load categories"):
            return (
                self.db.query(Category)
                .filter(Category.user_id == self.user_id)
                .order_by(Category.name)
                .all()
            )

    def get_category(self, category_id: str) -> Optional[Category]:
        with self._guard("load category"):
            return (
                self.db.query(Category)
                .filter(Category.id == category_id, Category.user_id == self.user_id)
                .first()
            )

    def _require_category(self, category_id: str) -> Category:
        category = self.get_category(category_id)
        if category is None:
            raise EntityNotFoundError("Category", category_id)
        return category

    def create_category(self, name: str) -> str:
        with self._guard("save category"):
            category = Category(user_id=self.user_id, name=name)
            self.db.add(category)
            self.db.commit()
            self.db.refresh(category)
            logger.info(f"Created category {category.id} ('{name}')")
            return category.id

    def update_category(self, category_id: str, name: str) -> None:
        category = self._require_category(category_id)
        with self._guard("save category"):
            category.name = name
            self.db.commit()

    def delete_category(self, category_id: str) -> None:
        """Habits keep their category_id and read as uncategorized"""
        category = self._require_category(category_id)
        with self._guard("delete category"):
            self.db.delete(category)
            self.db.commit()
            logger.info(f"Deleted category {category_id}")
