"""taskmate: personal task tracker with due-date buckets and local reminders."""

__version__ = "0.1.0"
