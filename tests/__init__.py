"""Test package for the AI dashboard.

Structure:
    - unit/: Client, catalog, configuration and dashboard state in isolation
    - integration/: Client and dashboard state against a fake FastAPI service

The prediction service is never contacted; integration tests route requests
to an in-process fake over httpx ASGITransport.
"""
