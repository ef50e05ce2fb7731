from .reseller import Reseller, ResellerUserMapping
from .router import Router
from .session import PPPoESession
