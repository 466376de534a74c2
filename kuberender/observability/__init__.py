"""Logging and metrics for kuberender.

Submodules:
    logging -- structlog JSON configuration and component-bound loggers.
    metrics -- prometheus counters.
"""
