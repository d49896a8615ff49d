import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SessionIssued(BaseModel):
    """Returned once when a session is minted; the raw token is never stored."""
    id: uuid.UUID
    token: str
    expires_at: Optional[datetime] = None
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SessionRevoked(BaseModel):
    id: uuid.UUID
    status: str
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
