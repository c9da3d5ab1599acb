"""
Structured logging configuration for the OIDC token validator.
"""

import sys
import structlog
import logging
from typing import Any, Dict


def configure_logging(service_name: str, log_level: str = "info") -> None:
    """Configure structured logging for an application embedding the validator."""

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _service_context(service_name),
            add_component_context,
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )


def _service_context(service_name: str):
    def add_service_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Add service name to log events."""
        event_dict.setdefault("service", service_name)
        return event_dict

    return add_service_context


def add_component_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add the validator component (e.g. ``jwks`` from ``oidc.jwks``) to log events."""
    logger_name = event_dict.get("logger", "")
    if "." in logger_name:
        event_dict["component"] = logger_name.split(".", 1)[1]

    return event_dict


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
