"""
AI insights.

Components:
- prompt.py: productivity-coach prompt built from task statistics
- parser.py: free-text reply -> InsightEntry list (never raises)
- service.py: generate_task_insights(), the only entry point callers need
"""
