import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

import aiohttp

from ...application.errors import ProviderError, ProviderUnconfigured
from ...application.ports.sms_gateway import SmsGateway, SmsProvider, SmsResult
from .africastalking_provider import AfricasTalkingSmsProvider
from .briq_provider import BriqSmsProvider

logger = logging.getLogger(__name__)


@dataclass
class SmsConfig:
    briq_api_key: str = ""
    briq_base_url: str = "https://api.briqsms.com"
    briq_sender_id: str = ""
    at_api_key: str = ""
    at_username: str = "sandbox"
    at_sender_id: str = ""
    simulate: bool = False
    timeout_ms: int = 10000

    @classmethod
    def from_settings(cls, settings) -> "SmsConfig":
        return cls(
            briq_api_key=settings.BRIQ_API_KEY,
            briq_base_url=settings.BRIQ_BASE_URL,
            briq_sender_id=settings.BRIQ_SENDER_ID,
            at_api_key=settings.AT_API_KEY,
            at_username=settings.AT_USERNAME,
            at_sender_id=settings.AT_SENDER_ID,
            simulate=settings.SMS_FAKE,
            timeout_ms=settings.SMS_TIMEOUT_MS,
        )


class SmsGatewayAdapter(SmsGateway):
    """Sends through Briq when it has a key, otherwise Africa's Talking.

    Selection is by configuration only: a failing primary is never swapped
    for the secondary on the same call. A connection-level error (DNS,
    refused, reset) gets exactly one more attempt; HTTP errors and timeouts
    are final.
    """

    def __init__(self, config: SmsConfig, session_factory: Callable[..., aiohttp.ClientSession] = aiohttp.ClientSession):
        self.config = config
        self.primary: Optional[SmsProvider] = None
        self.secondary: Optional[SmsProvider] = None
        if config.briq_api_key:
            self.primary = BriqSmsProvider(
                api_key=config.briq_api_key,
                base_url=config.briq_base_url,
                sender_id=config.briq_sender_id,
                timeout_ms=config.timeout_ms,
                simulate=config.simulate,
                session_factory=session_factory,
            )
        if config.at_api_key:
            self.secondary = AfricasTalkingSmsProvider(
                api_key=config.at_api_key,
                username=config.at_username,
                sender_id=config.at_sender_id,
                timeout_ms=config.timeout_ms,
                session_factory=session_factory,
            )

    @property
    def configured(self) -> bool:
        return self.primary is not None or self.secondary is not None

    def select_provider(self) -> SmsProvider:
        if self.primary is not None:
            return self.primary
        if self.secondary is not None:
            return self.secondary
        raise ProviderUnconfigured()

    async def send(self, recipients: List[str], message: str) -> SmsResult:
        provider = self.select_provider()
        try:
            result = await provider.send(recipients, message)
        except aiohttp.ClientConnectionError as first:
            logger.warning(f"SMS via {provider.name} hit a network error, retrying once: {first}")
            try:
                result = await provider.send(recipients, message)
            except aiohttp.ClientConnectionError as second:
                raise ProviderError(provider.name, None, str(second)) from second
        except ProviderError as e:
            logger.error(f"SMS via {provider.name} failed: {e.detail}")
            raise
        logger.info(f"SMS accepted by {result.provider} for {len(recipients)} recipient(s)")
        return result
