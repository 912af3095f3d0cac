"""
Logging Module

Configures process-wide logging for the workflow builder.
"""
from chatflow.logging.log_setup import setup_logging

__all__ = ['setup_logging']
