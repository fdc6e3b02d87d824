"""AI Dashboard - predictions, recommendations and chat for mining operations.

Combines NiceGUI for the dashboard, HTTPX for talking to the remote
prediction service, and Pydantic for data validation.

Components:
    - client: HTTP calls to the prediction service, including streamed chat
    - models: Request/response schemas and the model catalog
    - ui: Dashboard state coordination and the web page
"""

__version__ = "0.1.0"
