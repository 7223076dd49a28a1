"""
MPT Infrastructure Layer

External integrations: model backends, session storage and metrics.
All infrastructure components implement abstract interfaces for testability.
"""
