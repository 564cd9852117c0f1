# Routers package
from . import auth_router
from . import otp_router
from . import users_router
from . import sms_router

__all__ = [
    "auth_router",
    "otp_router",
    "users_router",
    "sms_router",
]
