"""
FastAPI server for the visit scheduler.

The application object lives in ``visit_scheduler.server.main``.
"""
