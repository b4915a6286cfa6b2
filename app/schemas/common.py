from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..clock import to_naive_utc

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class ApiModel(BaseModel):
    """Request body: camelCase on the wire, snake_case accepted too, unknown keys ignored."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_fields(self, exclude=()) -> Dict[str, Any]:
        """Fields the client actually sent, mapped onto model attribute names."""
        data = self.model_dump(exclude_unset=True, exclude=set(exclude))
        if "metadata" in data:
            data["extra"] = data.pop("metadata")
        return {
            key: to_naive_utc(value) if isinstance(value, datetime) else value
            for key, value in data.items()
        }
