import logging
from dataclasses import dataclass
from typing import Optional

from ..errors import InvalidPhone, InvalidPhoneProof, UserNotFound
from ..ports.user_repo import UserDto, UserRepository
from ...utils import is_valid_phone, normalize_phone, verify_phone_proof

logger = logging.getLogger(__name__)


@dataclass
class TwoFactorService:
    user_repo: UserRepository
    require_phone_proof: bool = False

    def set_two_factor(self, user_id: int, enabled: bool, phone: Optional[str] = None,
                       proof_token: Optional[str] = None) -> UserDto:
        if not self.user_repo.get_by_id(user_id):
            raise UserNotFound()

        if enabled:
            phone = normalize_phone(phone)
            if not is_valid_phone(phone):
                raise InvalidPhone(detail="Use +countrycode format")
            if proof_token is not None or self.require_phone_proof:
                if not proof_token or not verify_phone_proof(proof_token, phone):
                    logger.warning(f"2FA enable for user {user_id} rejected: no valid phone proof")
                    raise InvalidPhoneProof()

        user = self.user_repo.set_two_factor(user_id, enabled, phone if enabled else None)
        if user is None:
            raise UserNotFound()
        logger.info(f"2FA {'enabled' if enabled else 'disabled'} for user {user_id}")
        return user
