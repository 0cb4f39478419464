"""Tests for the <leaseInfo> XML codec."""

import xml.etree.ElementTree as ET

import pytest

from lease_info import LeaseInfo
from lease_xml import FIELD_ORDER, lease_from_element, lease_from_xml, lease_to_element, lease_to_xml


def test_element_children_follow_field_order():
    lease = LeaseInfo.builder().set_registration_timestamp(100).set_renewal_timestamp(200).build()
    element = lease_to_element(lease)
    assert element.tag == "leaseInfo"
    assert [child.tag for child in element] == list(FIELD_ORDER)
    assert element.find("lastRenewalTimestamp").text == "200"
    assert element.find("renewalTimestamp") is None


def test_xml_document_reads_back():
    lease = (
        LeaseInfo.builder()
        .set_renewal_interval_in_secs(5)
        .set_duration_in_secs(15)
        .set_registration_timestamp(1000)
        .set_renewal_timestamp(1100)
        .set_service_up_timestamp(1001)
        .build()
    )
    text = lease_to_xml(lease)
    assert text.startswith("<?xml")
    assert lease_from_xml(text) == lease


def test_legacy_renewal_element_is_used_as_fallback():
    element = ET.fromstring(
        "<leaseInfo><durationInSecs>60</durationInSecs><renewalTimestamp>700</renewalTimestamp></leaseInfo>"
    )
    lease = lease_from_element(element)
    assert lease.last_renewal_timestamp == 700
    assert lease.duration_in_secs == 60
    assert lease.renewal_interval_in_secs == 0


def test_canonical_renewal_element_wins():
    lease = lease_from_xml(
        "<leaseInfo><lastRenewalTimestamp>800</lastRenewalTimestamp>"
        "<renewalTimestamp>700</renewalTimestamp></leaseInfo>"
    )
    assert lease.last_renewal_timestamp == 800


def test_empty_canonical_element_falls_back_to_legacy():
    lease = lease_from_xml("<leaseInfo><lastRenewalTimestamp/><renewalTimestamp>700</renewalTimestamp></leaseInfo>")
    assert lease.last_renewal_timestamp == 700


def test_lease_found_inside_instance_document():
    lease = lease_from_xml("<instance><app>X</app><leaseInfo><evictionTimestamp>9</evictionTimestamp></leaseInfo></instance>")
    assert lease.eviction_timestamp == 9


def test_missing_lease_element_raises():
    with pytest.raises(ValueError):
        lease_from_xml("<instance><app>X</app></instance>")


def test_non_integer_text_raises():
    with pytest.raises(ValueError):
        lease_from_xml("<leaseInfo><durationInSecs>neunzig</durationInSecs></leaseInfo>")


def test_unknown_children_are_ignored():
    lease = lease_from_xml(
        "<leaseInfo><durationInSecs>60</durationInSecs><note>abc</note>"
        "<renewalTimestamp>700</renewalTimestamp></leaseInfo>"
    )
    assert lease.duration_in_secs == 60
    assert lease.last_renewal_timestamp == 700
