"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskDraft, ViewConfig, TaskView, filter enums)
- task_view.py: pure filter -> sort -> paginate pipeline + page indicator
- task_stats.py: counts, overdue detection, upcoming deadlines
- task_api.py: HTTP client for the remote task service
"""
