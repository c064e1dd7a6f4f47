from .habit import Habit, HabitReport, Category
