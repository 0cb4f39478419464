# lease_xml.py
import xml.etree.ElementTree as ET
from typing import Dict

from lease_info import LEGACY_RENEWAL_FIELD, ROOT_NAME, LeaseInfo

# Child element order as Eureka servers emit it
FIELD_ORDER = (
    "renewalIntervalInSecs",
    "durationInSecs",
    "registrationTimestamp",
    "lastRenewalTimestamp",
    "evictionTimestamp",
    "serviceUpTimestamp",
)

KNOWN_TAGS = frozenset(FIELD_ORDER) | {LEGACY_RENEWAL_FIELD}


def lease_to_element(lease: LeaseInfo) -> ET.Element:
    lease_element = ET.Element(ROOT_NAME)
    values = lease.to_dict()
    for name in FIELD_ORDER:
        ET.SubElement(lease_element, name).text = str(values[name])
    return lease_element


def lease_to_xml(lease: LeaseInfo) -> str:
    return ET.tostring(lease_to_element(lease), encoding='utf-8', xml_declaration=True).decode('utf-8')


def lease_from_element(element: ET.Element) -> LeaseInfo:
    """
    Liest ein <leaseInfo>-Element. Fehlende Kinder gelten als 0,
    <renewalTimestamp> wird nur ohne <lastRenewalTimestamp> verwendet.
    Unbekannte Kinder werden ignoriert.
    """
    values: Dict[str, int] = {}
    for child in element:
        if child.tag not in KNOWN_TAGS:
            continue
        text = (child.text or "").strip()
        if not text:
            continue
        try:
            values[child.tag] = int(text)
        except ValueError:
            raise ValueError(f"Ungültiger Wert für <{child.tag}>: {text!r}") from None

    return LeaseInfo.from_dict(values)


def lease_from_xml(text: str) -> LeaseInfo:
    root = ET.fromstring(text)
    if root.tag != ROOT_NAME:
        lease_element = root.find(ROOT_NAME)
        if lease_element is None:
            raise ValueError(f"Kein <{ROOT_NAME}>-Element in <{root.tag}> gefunden")
        root = lease_element
    return lease_from_element(root)
