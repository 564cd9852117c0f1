import asyncio
import logging
from typing import Callable, List

import aiohttp

from ...application.errors import ProviderError
from ...application.ports.sms_gateway import SmsProvider, SmsResult

logger = logging.getLogger(__name__)


class BriqSmsProvider(SmsProvider):
    name = "briq"

    def __init__(self, api_key: str, base_url: str, sender_id: str = "", timeout_ms: int = 10000,
                 simulate: bool = False, session_factory: Callable[..., aiohttp.ClientSession] = aiohttp.ClientSession):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.sender_id = sender_id
        self.timeout_ms = timeout_ms
        self.simulate = simulate
        self._session_factory = session_factory

    async def send(self, recipients: List[str], message: str) -> SmsResult:
        if self.simulate:
            logger.info(f"[SMS_FAKE] Briq send simulated: to={recipients} from={self.sender_id or '-'}")
            return SmsResult(provider=self.name, provider_data={"simulated": True})

        url = f"{self.base_url}/sms/send"
        body = {"to": recipients, "message": message}
        if self.sender_id:
            body["from"] = self.sender_id
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        timeout = aiohttp.ClientTimeout(total=self.timeout_ms / 1000)
        try:
            async with self._session_factory(timeout=timeout) as session:
                async with session.post(url, json=body, headers=headers) as response:
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
            # Network-level: the gateway decides whether to try again
            raise
        except aiohttp.ClientError as e:
            raise ProviderError(self.name, None, str(e))
        return SmsResult(provider=self.name, provider_data=data if isinstance(data, dict) else {"response": data})
