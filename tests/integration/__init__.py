"""Integration tests for components working together as a system.

Coverage:
    - PredictionServiceClient against a FastAPI fake of the service
    - DashboardState driving the full predict and chat flows

The fake service validates requests with the shared Pydantic schemas.
"""
