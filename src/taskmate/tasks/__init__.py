"""
Task subsystem.

Components:
- task_models.py: data structures (TaskRecord, ReminderPayload)
- task_scheduler.py: reminder reconciliation against the notification delivery port
- task_store.py: mutation authority (create / update / delete / toggle) + snapshot reads
- task_buckets.py: Overdue / Today / Tomorrow / Upcoming grouping
- task_api.py: search and stats helpers used by the console host
"""
