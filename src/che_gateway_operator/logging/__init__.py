"""Logging configuration for che_gateway_operator."""

from che_gateway_operator.logging.config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
