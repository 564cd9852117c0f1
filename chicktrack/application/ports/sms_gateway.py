from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol


@dataclass
class SmsResult:
    provider: str
    provider_data: Dict[str, Any] = field(default_factory=dict)


class SmsGateway(Protocol):
    @property
    def configured(self) -> bool:
        ...

    async def send(self, recipients: List[str], message: str) -> SmsResult:
        ...


class SmsProvider(Protocol):
    name: str

    async def send(self, recipients: List[str], message: str) -> SmsResult:
        ...
