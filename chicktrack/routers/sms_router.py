from fastapi import APIRouter, Depends, HTTPException
import logging

from ..application.ports.sms_gateway import SmsGateway
from ..dependencies import get_sms_gateway
from ..schemas.sms.sms import SmsSendRequest, SmsSendResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sms", tags=["SMS"])


@router.post("/send", response_model=SmsSendResponse)
async def send_sms(payload: SmsSendRequest, gateway: SmsGateway = Depends(get_sms_gateway)):
    """
    Operational proxy straight to the configured SMS provider
    """
    recipients = payload.recipients()
    if not recipients:
        raise HTTPException(status_code=400, detail="to and message are required")
    result = await gateway.send(recipients, payload.message)
    return SmsSendResponse(provider=result.provider, data=result.provider_data)
