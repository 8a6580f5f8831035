from __future__ import annotations

from dataclasses import asdict
from datetime import date, datetime


def to_jsonable(obj):
    """Convert domain objects to a JSON-serializable form.

    Handles:
    - Basic types (str, int, float, bool, None)
    - Collections (list, tuple, set, dict)
    - Dates and datetimes (ISO 8601)
    - Pydantic models
    - Dataclasses

    Args:
        obj: Any Python object

    Returns:
        A JSON-serializable version of the object
    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    elif isinstance(obj, (datetime, date)):
        return obj.isoformat()
    elif isinstance(obj, (list, tuple)):
        return [to_jsonable(item) for item in obj]
    elif isinstance(obj, (set, frozenset)):
        return [to_jsonable(item) for item in sorted(obj, key=str)]
    elif isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    elif hasattr(obj, 'model_dump'):  # Pydantic v2
        return to_jsonable(obj.model_dump())
    elif hasattr(obj, '__dataclass_fields__'):
        return to_jsonable(asdict(obj))
    else:
        return str(obj)
