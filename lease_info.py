# lease_info.py
"""
Lease-Informationen, die die Registry für eine Service-Instanz hält.

Die Registry entfernt eine Instanz aus ihrer Sicht abhängig von
``duration_in_secs``, das der Client über seine Lease-Konfiguration setzt.
Die Lease merkt sich außerdem Registrierung, letzte Erneuerung, Entfernung
und UP-Zeitpunkt.

Leases sind unveränderlich. Neue Leases entstehen über ``LeaseInfo.builder()``,
Leases vom Server werden mit ``LeaseInfo.from_dict()`` / ``LeaseInfo.from_json()``
gelesen.
"""
import json
import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

DEFAULT_LEASE_RENEWAL_INTERVAL = 30
DEFAULT_LEASE_DURATION = 90

ROOT_NAME = "leaseInfo"

# Ältere Server senden die letzte Erneuerung unter diesem Namen.
LEGACY_RENEWAL_FIELD = "renewalTimestamp"


class LeaseInfo(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Client-Einstellungen
    renewal_interval_in_secs: int = Field(DEFAULT_LEASE_RENEWAL_INTERVAL, alias="renewalIntervalInSecs")
    duration_in_secs: int = Field(DEFAULT_LEASE_DURATION, alias="durationInSecs")

    # Von der Registry gesetzt, Millisekunden seit Epoch
    registration_timestamp: int = Field(0, alias="registrationTimestamp")
    last_renewal_timestamp: int = Field(0, alias="lastRenewalTimestamp")
    eviction_timestamp: int = Field(0, alias="evictionTimestamp")
    service_up_timestamp: int = Field(0, alias="serviceUpTimestamp")

    @classmethod
    def builder(cls) -> "LeaseInfoBuilder":
        return LeaseInfoBuilder()

    def to_builder(self) -> "LeaseInfoBuilder":
        """Builder mit den unveränderten Werten dieser Lease."""
        return LeaseInfoBuilder.from_lease(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LeaseInfo":
        """
        Liest eine Lease aus ihrer Wire-Form.

        ``lastRenewalTimestamp`` gewinnt, wenn vorhanden und nicht null, sonst wird
        das alte ``renewalTimestamp`` verwendet. Fehlende oder null-Werte gelten als 0,
        Intervall und Dauer werden ohne Defaults übernommen.
        """
        if isinstance(data.get(ROOT_NAME), Mapping):
            data = data[ROOT_NAME]

        last_renewal = data.get("lastRenewalTimestamp")
        if last_renewal is None:
            last_renewal = data.get(LEGACY_RENEWAL_FIELD)

        return cls(
            renewal_interval_in_secs=_or_zero(data.get("renewalIntervalInSecs")),
            duration_in_secs=_or_zero(data.get("durationInSecs")),
            registration_timestamp=_or_zero(data.get("registrationTimestamp")),
            last_renewal_timestamp=_or_zero(last_renewal),
            eviction_timestamp=_or_zero(data.get("evictionTimestamp")),
            service_up_timestamp=_or_zero(data.get("serviceUpTimestamp")),
        )

    @classmethod
    def from_json(cls, text: str) -> "LeaseInfo":
        return cls.from_dict(json.loads(text))

    def to_dict(self) -> Dict[str, int]:
        return self.model_dump(by_alias=True)

    def to_json(self, wrap_root: bool = False) -> str:
        data: Dict[str, Any] = self.to_dict()
        if wrap_root:
            data = {ROOT_NAME: data}
        return json.dumps(data)


class LeaseInfoBuilder:
    """
    Sammelt Lease-Felder und erzeugt genau eine ``LeaseInfo``.

    Fehlende oder nicht-positive Werte für Intervall und Dauer werden durch die
    Defaults ersetzt, Zeitstempel unverändert übernommen. Nicht thread-safe,
    pro Lease einen eigenen Builder verwenden.
    """

    def __init__(self):
        self._fields: Dict[str, int] = {
            "renewal_interval_in_secs": DEFAULT_LEASE_RENEWAL_INTERVAL,
            "duration_in_secs": DEFAULT_LEASE_DURATION,
            "registration_timestamp": 0,
            "last_renewal_timestamp": 0,
            "eviction_timestamp": 0,
            "service_up_timestamp": 0,
        }
        self._result: Optional[LeaseInfo] = None

    @classmethod
    def from_lease(cls, lease: LeaseInfo) -> "LeaseInfoBuilder":
        builder = cls()
        builder._fields.update(lease.model_dump())
        return builder

    def _set(self, name: str, value: int) -> "LeaseInfoBuilder":
        self._fields[name] = value
        self._result = None
        return self

    def set_registration_timestamp(self, ts: int) -> "LeaseInfoBuilder":
        return self._set("registration_timestamp", ts)

    def set_renewal_timestamp(self, ts: int) -> "LeaseInfoBuilder":
        return self._set("last_renewal_timestamp", ts)

    def set_eviction_timestamp(self, ts: int) -> "LeaseInfoBuilder":
        return self._set("eviction_timestamp", ts)

    def set_service_up_timestamp(self, ts: int) -> "LeaseInfoBuilder":
        return self._set("service_up_timestamp", ts)

    def set_duration_in_secs(self, d: Optional[int]) -> "LeaseInfoBuilder":
        if d is None or d <= 0:
            logger.debug(f"durationInSecs {d} ist ungültig, verwende {DEFAULT_LEASE_DURATION}.")
            d = DEFAULT_LEASE_DURATION
        return self._set("duration_in_secs", d)

    def set_renewal_interval_in_secs(self, i: Optional[int]) -> "LeaseInfoBuilder":
        if i is None or i <= 0:
            logger.debug(f"renewalIntervalInSecs {i} ist ungültig, verwende {DEFAULT_LEASE_RENEWAL_INTERVAL}.")
            i = DEFAULT_LEASE_RENEWAL_INTERVAL
        return self._set("renewal_interval_in_secs", i)

    def build(self) -> LeaseInfo:
        # Wiederholte Aufrufe liefern dieselbe Lease, bis ein Setter erneut läuft.
        if self._result is None:
            self._result = LeaseInfo(**self._fields)
        return self._result


def _or_zero(value: Any) -> Any:
    return 0 if value is None else value
