# reseller_monitor/utils/device_clients/mikrotik/rest_client.py

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import requests
import urllib3
from requests.auth import HTTPBasicAuth

from ....core.config import ROUTER_POLL_TIMEOUT, ROUTER_VERIFY_SSL
from ....core.constants import PPP_ACTIVE_PATH, PollStatus, RouterOSVersion
from ....core.exceptions import AuthFailure, ConfigurationUnsupported, Unreachable
from ....models.router import Router

# Desactivar los warnings de SSL ya que los routers a menudo
# usan certificados autofirmados, lo cual es normal en una red interna.
urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

logger = logging.getLogger(__name__)


@dataclass
class PollOutcome:
    """Classified result of one poll against one router."""

    status: PollStatus
    sessions: list[dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_online(self) -> bool:
        # A 401 means the router answered, so it is reachable
        return self.status in (PollStatus.OK, PollStatus.AUTH_FAILURE)


class RouterOSRestClient:
    """
    Cliente para la API REST de RouterOS v7.
    Una sola petición GET autenticada con HTTP Basic por consulta.
    """

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        port: int = 443,
        use_https: bool = True,
        timeout: float = ROUTER_POLL_TIMEOUT,
        verify_ssl: bool = ROUTER_VERIFY_SSL,
    ):
        protocol = "https" if use_https else "http"
        self.base_url = f"{protocol}://{host}:{port}"
        self.timeout = timeout
        self.session = requests.Session()
        self.session.auth = HTTPBasicAuth(username, password)
        self.session.verify = verify_ssl
        self.session.headers.update({"Accept": "application/json"})

    @classmethod
    def for_router(cls, router: Router, timeout: float = ROUTER_POLL_TIMEOUT) -> "RouterOSRestClient":
        if router.routeros_version != RouterOSVersion.V7.value:
            raise ConfigurationUnsupported(
                f"RouterOS {router.routeros_version or 'unknown'} is not supported (v7 REST API required)"
            )
        return cls(
            host=router.host,
            username=router.username,
            password=router.password,
            port=router.port,
            use_https=router.use_https,
            timeout=timeout,
        )

    def get_active_sessions(self) -> list[dict[str, Any]]:
        """
        Returns the raw records of /ppp/active.

        Raises:
            AuthFailure: the router rejected the credentials (HTTP 401).
            Unreachable: connection error, timeout or any other unexpected answer.
        """
        url = self.base_url + PPP_ACTIVE_PATH
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise Unreachable(f"Timeout after {self.timeout}s: {e}") from e
        except requests.exceptions.SSLError as e:
            raise Unreachable(f"TLS error: {e}") from e
        except requests.exceptions.RequestException as e:
            raise Unreachable(f"Router unreachable: {e}") from e

        if response.status_code == 401:
            raise AuthFailure("Authentication failed")
        if not 200 <= response.status_code < 300:
            raise Unreachable(f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise Unreachable(f"Invalid JSON from router: {e}") from e

        if not isinstance(data, list):
            raise Unreachable("Unexpected response from router: expected a JSON array")
        return [item for item in data if isinstance(item, dict)]

    def close(self):
        self.session.close()


def poll_router(router: Router, timeout: float = ROUTER_POLL_TIMEOUT) -> PollOutcome:
    """
    Consulta las sesiones PPP activas de un router y clasifica el resultado.
    Función bloqueante: se ejecuta en un hilo desde el coordinador.
    """
    try:
        client = RouterOSRestClient.for_router(router, timeout=timeout)
    except ConfigurationUnsupported as e:
        logger.info(f"Skipping {router.name}: {e}")
        return PollOutcome(status=PollStatus.UNSUPPORTED, error=str(e))

    try:
        sessions = client.get_active_sessions()
        return PollOutcome(status=PollStatus.OK, sessions=sessions)
    except AuthFailure as e:
        return PollOutcome(status=PollStatus.AUTH_FAILURE, error=str(e))
    except Unreachable as e:
        return PollOutcome(status=PollStatus.UNREACHABLE, error=str(e))
    finally:
        client.close()
