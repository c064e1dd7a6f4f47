from sqlalchemy import Column, String, DateTime, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship
from habit_hub.db.base import Base
from datetime import datetime, timezone
import uuid


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Category(Base):
    __tablename__ = "habit_category"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)

    def __repr__(self):
        return f"<Category(name='{self.name}')>"


class Habit(Base):
    __tablename__ = "habit"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    type = Column(String, nullable=False)  # duration, time, boolean, number, options
    frequency = Column(String, nullable=False)  # daily, weekly
    goal = Column(Text, nullable=False, default="")
    icon = Column(String, nullable=False, default="Target")
    options = Column(Text, nullable=True)  # comma-separated labels for "options" habits
    # Weak reference: deleting a category leaves this dangling
    category_id = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    reports = relationship(
        "HabitReport",
        back_populates="habit",
        cascade="all, delete-orphan",
        order_by="HabitReport.reported_at",
    )

    def __repr__(self):
        return f"<Habit(name='{self.name}', type='{self.type}')>"


class HabitReport(Base):
    __tablename__ = "habit_report"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    habit_id = Column(String, ForeignKey("habit.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False)
    value = Column(JSON, nullable=True)
    # Assigned on insert, never taken from the client
    reported_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    habit = relationship("Habit", back_populates="reports")

    def __repr__(self):
        return f"<HabitReport(habit_id='{self.habit_id}', value={self.value!r})>"
