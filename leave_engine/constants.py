"""
Service-wide constants
"""

SERVICE_NAME = "leave-entitlement-engine"
DEFAULT_VERSION = "1.0.0"
