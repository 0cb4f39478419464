# instance_registration.py
import logging
import socket
import threading
import time
import xml.etree.ElementTree as ET
from typing import Callable, Optional

from lease_config import ClientConfig
from lease_info import LeaseInfo, LeaseInfoBuilder
from lease_xml import lease_to_element

logger = logging.getLogger(__name__)

DATA_CENTER_INFO_CLASS = "com.netflix.appinfo.InstanceInfo$DefaultDataCenterInfo"


def current_millis() -> int:
    return int(time.time() * 1000)


def instance_id(config: ClientConfig) -> str:
    return f"{config.hostName}:{config.serviceName.upper()}:{config.httpPort}"


def get_ip_address(hostname: str) -> str:
    try:
        ip_addr = socket.gethostbyname(hostname)
        return ip_addr
    except socket.gaierror:
        logger.warning(f"IP-Adresse für Hostname '{hostname}' konnte nicht ermittelt werden. Verwende '127.0.0.1'.")
        return "127.0.0.1"


def registration_lease(config: ClientConfig, now: Optional[int] = None) -> LeaseInfo:
    """
    Erstellt die Lease für eine neue Registrierung aus der Service-Konfiguration.
    Registrierung, letzte Erneuerung und UP-Zeitpunkt werden auf ``now`` gesetzt.
    """
    if now is None:
        now = current_millis()
    return (
        LeaseInfo.builder()
        .set_renewal_interval_in_secs(config.leaseInfo.renewalIntervalInSecs)
        .set_duration_in_secs(config.leaseInfo.durationInSecs)
        .set_registration_timestamp(now)
        .set_renewal_timestamp(now)
        .set_service_up_timestamp(now)
        .build()
    )


def _active_endpoint(config: ClientConfig):
    """Liefert (scheme, aktiver Port) abhängig von sslPreferred."""
    if config.sslPreferred:
        return "https", config.securePort
    return "http", config.httpPort


def build_instance_payload(config: ClientConfig, lease: LeaseInfo, ip_address: Optional[str] = None) -> str:
    """
    Registrierungsdokument <instance> inklusive <leaseInfo>, so wie es an
    den Eureka-Server geschickt wird. Es wird nichts gesendet.
    """
    service_name = config.serviceName.upper()
    if ip_address is None:
        ip_address = get_ip_address(config.hostName)

    scheme, active_port = _active_endpoint(config)
    base_url = f"{scheme}://{config.hostName}:{active_port}"

    instance_element = ET.Element("instance")
    for tag, text in (
        ("instanceId", instance_id(config)),
        ("hostName", config.hostName),
        ("app", service_name),
        ("ipAddr", ip_address),
        ("vipAddress", service_name.lower()),
        ("secureVipAddress", service_name.lower()),
        ("status", "UP"),
    ):
        ET.SubElement(instance_element, tag).text = text

    for tag, port, enabled in (
        ("port", config.httpPort, not config.sslPreferred),
        ("securePort", config.securePort, config.sslPreferred),
    ):
        ET.SubElement(instance_element, tag, attrib={"enabled": str(enabled).lower()}).text = str(port)

    ET.SubElement(instance_element, "homePageUrl").text = f"{base_url}/"
    ET.SubElement(instance_element, "statusPageUrl").text = f"{base_url}{config.infoEndpointPath}"
    ET.SubElement(instance_element, "healthCheckUrl").text = f"{base_url}{config.healthEndpointPath}"

    data_center = ET.SubElement(instance_element, "dataCenterInfo", attrib={"class": DATA_CENTER_INFO_CLASS})
    ET.SubElement(data_center, "name").text = config.dataCenterInfoName

    instance_element.append(lease_to_element(lease))

    xml_payload = ET.tostring(instance_element, encoding='utf-8', xml_declaration=True).decode('utf-8')
    logger.debug(f"[{service_name}] XML-Payload:\n{xml_payload}")
    return xml_payload


class LeaseEntry:
    """
    Hält die aktuelle Lease einer Instanz. Jede Zustandsänderung erzeugt
    eine neue LeaseInfo und ersetzt die Referenz; Ablauf wird hier nicht berechnet.
    """

    def __init__(self, lease: LeaseInfo):
        self._lock = threading.Lock()
        self._lease = lease

    @property
    def current(self) -> LeaseInfo:
        with self._lock:
            return self._lease

    def _replace(self, setter: Callable[[LeaseInfoBuilder, int], LeaseInfoBuilder], ts: Optional[int]) -> LeaseInfo:
        if ts is None:
            ts = current_millis()
        with self._lock:
            self._lease = setter(self._lease.to_builder(), ts).build()
            logger.debug(f"Lease aktualisiert ({setter.__name__}={ts}).")
            return self._lease

    def renew(self, ts: Optional[int] = None) -> LeaseInfo:
        return self._replace(LeaseInfoBuilder.set_renewal_timestamp, ts)

    def mark_up(self, ts: Optional[int] = None) -> LeaseInfo:
        return self._replace(LeaseInfoBuilder.set_service_up_timestamp, ts)

    def evict(self, ts: Optional[int] = None) -> LeaseInfo:
        return self._replace(LeaseInfoBuilder.set_eviction_timestamp, ts)
