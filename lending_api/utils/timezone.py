from datetime import datetime
from typing import Optional
import pytz
from lending_api.config import settings

LOCAL_TZ = pytz.timezone(settings.timezone)

def now_local() -> datetime:
    """Get current datetime in the configured library timezone."""
    return datetime.now(LOCAL_TZ)

def to_local(value: Optional[datetime]) -> Optional[datetime]:
    """Express a stored (UTC) timestamp in the configured library timezone."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = pytz.utc.localize(value)
    return value.astimezone(LOCAL_TZ)
