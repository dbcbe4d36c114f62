"""
Core utilities and configuration for the trending ingestion service.

Modules:
    config: Settings (environment) and the per-run PipelineConfig
    database: Per-run engine and session factory creation
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import Settings, PipelineConfig
    from core.database import create_session_factory
    from core.exceptions import ConfigurationError, FetchError
    from core.logging import setup_logging

Example:
    setup_logging()

    config = PipelineConfig.from_settings(Settings())
    engine, session_factory = create_session_factory(config)
    try:
        async with session_factory() as session:
            ...
    finally:
        await engine.dispose()
"""

__all__ = [
    "Settings",
    "PipelineConfig",
    "create_session_factory",
    "setup_logging",
    # Exceptions
    "ETLException",
    "ConfigurationError",
    "FetchError",
    "RateLimitError",
    "NormalizationError",
    "PersistenceError",
]
