"""ID Generation Utilities"""
import uuid
from datetime import datetime, timezone


def generate_correlation_id() -> str:
    """
    Generate a correlation ID for tracing a sync run

    Returns:
        Correlation ID string with timestamp prefix
    """
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    unique_part = uuid.uuid4().hex[:8]
    return f"COR-{timestamp}-{unique_part}"


def generate_run_id() -> str:
    """Generate an ID for one scheduler instance"""
    return f"RUN-{uuid.uuid4().hex[:12]}"
