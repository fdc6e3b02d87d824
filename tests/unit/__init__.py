"""Unit tests for individual components in isolation.

Coverage:
    - client/: Request payloads, failure mapping, streaming and cancellation
    - models/: Catalog lookup, label ranking and input helpers
    - ui/state: Predict sequencing, stale-response guard and chat transcript

Network responses come from httpx.MockTransport handlers or a recording fake
client. Leverages pytest-check for multiple assertions per test.
"""
