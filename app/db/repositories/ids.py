import uuid
from typing import Optional, Union


def as_uuid(value: Union[str, uuid.UUID, None]) -> Optional[uuid.UUID]:
    """Coerce a path/claim id to UUID; malformed ids yield None so lookups miss."""
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None
