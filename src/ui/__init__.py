"""NiceGUI interface - thin visualization layer for the dashboard.

Responsibilities:
    - Model selection and feature input forms
    - Prediction, recommendation and email summary display
    - Chat transcript with streaming replies

Sequencing and state live in ui.state, which holds no NiceGUI code.
The page only renders that state and forwards user events to it.
"""
