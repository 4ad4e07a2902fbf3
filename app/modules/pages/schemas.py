from pydantic import BaseModel
from typing import Any, Dict, Optional
from app.modules.boot.schemas import BootState


class PagePayload(BaseModel):
    page: str
    boot: Optional[BootState] = None
    signed_out: bool = False
    verified: Optional[bool] = None
    return_url: Optional[str] = None
    read_only: bool = False
    client_profile: Optional[Dict[str, Any]] = None
