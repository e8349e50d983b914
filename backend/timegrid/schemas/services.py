# backend/timegrid/schemas/services.py

from typing import Optional

from .availability import CamelModel


class CheckServiceResponse(CamelModel):
    is_service: bool
    service_id: Optional[str] = None
    duration: Optional[int] = None
    title: Optional[str] = None
