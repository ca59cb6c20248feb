import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID


class LogRecordEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        elif isinstance(obj, (datetime, date)):
            return obj.isoformat()
        elif isinstance(obj, Enum):
            return obj.value
        elif isinstance(obj, UUID):
            return str(obj)
        # Pydantic models (connection definitions, driver configs)
        elif hasattr(obj, "model_dump"):
            return obj.model_dump(mode="json")
        return repr(obj)


def dumps(obj: Any, **kwargs) -> str:
    """JSON dumps that never fails on log context values."""
    return json.dumps(obj, cls=LogRecordEncoder, **kwargs)
