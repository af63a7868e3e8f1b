"""
Local notification delivery.

Components:
- center.py: pending notifications keyed by task id
- selection.py: "last selected task id" hand-off
- runner.py: polling loop that fires due notifications
"""
