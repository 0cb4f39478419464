# lease_config.py
import json
import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from lease_info import DEFAULT_LEASE_DURATION, DEFAULT_LEASE_RENEWAL_INTERVAL

logger = logging.getLogger(__name__)


class LeaseConfig(BaseModel):
    # null oder nicht-positive Werte sind erlaubt, der Lease-Builder ersetzt sie.
    renewalIntervalInSecs: Optional[int] = DEFAULT_LEASE_RENEWAL_INTERVAL
    durationInSecs: Optional[int] = DEFAULT_LEASE_DURATION


class ClientConfig(BaseModel):
    serviceName: str
    healthEndpointPath: str
    infoEndpointPath: str
    httpPort: int
    securePort: int = 443
    hostName: str
    dataCenterInfoName: str = "MyOwn"
    sslPreferred: bool = False
    leaseInfo: LeaseConfig = Field(default_factory=LeaseConfig)


def load_service_configs(path: str = "services.json") -> List[ClientConfig]:
    """
    Lädt die Service-Definitionen aus einer JSON-Datei (Liste von Objekten).
    Fehlt "leaseInfo", gelten 30s Renewal-Intervall und 90s Dauer.
    """
    with open(path, "r") as f:
        raw_services = json.load(f)

    configs = [ClientConfig.model_validate(entry) for entry in raw_services]
    logger.info(f"{len(configs)} Services aus {path} geladen.")
    return configs
