"""
Global Constants

Infrastructure constants, not domain thresholds.
"""

# ============================================================================
# HTTP Headers
# ============================================================================

TRACE_HEADER_NAME = "x-request-id"


# ============================================================================
# Service Metadata
# ============================================================================

SERVICE_NAME = "freight_match"
SERVICE_VERSION = "1.0.0"
