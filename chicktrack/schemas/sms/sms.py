# chicktrack/schemas/sms/sms.py
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Union

class SmsSendRequest(BaseModel):
    to: Union[str, List[str]]
    message: str = Field(..., min_length=1)

    def recipients(self) -> List[str]:
        items = self.to if isinstance(self.to, list) else [self.to]
        return [str(item).strip() for item in items if str(item).strip()]

class SmsSendResponse(BaseModel):
    ok: bool = True
    provider: str
    data: Dict[str, Any] = {}
