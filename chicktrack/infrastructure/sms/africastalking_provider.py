import asyncio
import logging
from typing import Callable, List

import aiohttp

from ...application.errors import ProviderError
from ...application.ports.sms_gateway import SmsProvider, SmsResult

logger = logging.getLogger(__name__)

LIVE_URL = "https://api.africastalking.com/version1/messaging"
SANDBOX_URL = "https://api.sandbox.africastalking.com/version1/messaging"


class AfricasTalkingSmsProvider(SmsProvider):
    name = "africastalking"

    def __init__(self, api_key: str, username: str = "sandbox", sender_id: str = "", timeout_ms: int = 10000,
                 session_factory: Callable[..., aiohttp.ClientSession] = aiohttp.ClientSession):
        self.api_key = api_key
        self.username = username or "sandbox"
        self.sender_id = sender_id
        self.timeout_ms = timeout_ms
        self._session_factory = session_factory

    @property
    def url(self) -> str:
        return SANDBOX_URL if self.username == "sandbox" else LIVE_URL

    async def send(self, recipients: List[str], message: str) -> SmsResult:
        form = {"username": self.username, "to": ",".join(recipients), "message": message}
        # Sandbox accounts reject unknown sender ids, so only send one when set
        if self.sender_id:
            form["from"] = self.sender_id
        headers = {"apiKey": self.api_key, "Accept": "application/json"}
        timeout = aiohttp.ClientTimeout(total=self.timeout_ms / 1000)
        try:
            async with self._session_factory(timeout=timeout) as session:
                async with session.post(self.url, data=form, headers=headers) as response:
                    if response.status >= 400:
                        text = await response.text()
                        raise ProviderError(self.name, response.status, text)
                    try:
                        data = await response.json(content_type=None)
                    except ValueError:
                        data = {}
        except asyncio.TimeoutError:
            raise ProviderError(self.name, None, f"timed out after {self.timeout_ms}ms")
        except aiohttp.ClientConnectionError:
            raise
        except aiohttp.ClientError as e:
            raise ProviderError(self.name, None, str(e))
        return SmsResult(provider=self.name, provider_data=data if isinstance(data, dict) else {"response": data})
