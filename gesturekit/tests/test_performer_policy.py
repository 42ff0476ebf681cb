from __future__ import annotations

import pytest

from gesturekit.api import environment
from gesturekit.api.performer import policy
from gesturekit.api.performer import (
    IncompatibleEnvironmentError,
    IncompatibleOptionError,
    InvalidOptionError,
    PerformerKind,
    default_performer,
    describe_decision,
    select_performer,
)
from gesturekit.api.version import Version


class FakeToolchain:
    def __init__(self, gte_8: bool):
        self.gte_8 = gte_8
        self.calls = 0

    def version_gte_8(self) -> bool:
        self.calls += 1
        return self.gte_8


class FakeDevice:
    def __init__(self, version: str = "10.3"):
        self._version = Version(version)
        self.calls = 0

    def version(self) -> Version:
        self.calls += 1
        return self._version


class ExplodingFacts:
    """Fails the test if the policy asks for a fact it should not need."""

    def version_gte_8(self) -> bool:
        raise AssertionError("toolchain consulted")

    def version(self) -> Version:
        raise AssertionError("device consulted")


@pytest.fixture(autouse=True)
def _not_in_cloud(monkeypatch):
    monkeypatch.delenv(environment.CLOUD_MODE_ENV, raising=False)


@pytest.fixture
def in_cloud(monkeypatch):
    monkeypatch.setenv(environment.CLOUD_MODE_ENV, "1")


def test_default_in_cloud_is_instruments_without_reading_facts(in_cloud):
    facts = ExplodingFacts()
    assert default_performer(facts, facts) is PerformerKind.INSTRUMENTS


def test_default_xcode_below_8_is_instruments_for_any_device():
    device = ExplodingFacts()
    assert default_performer(FakeToolchain(False), device) is PerformerKind.INSTRUMENTS


def test_default_xcode_8_with_ios_9_is_device_agent():
    device = FakeDevice("9.0")
    assert default_performer(FakeToolchain(True), device) is PerformerKind.DEVICE_AGENT
    assert device.calls == 1


def test_default_xcode_8_with_ios_8_raises():
    with pytest.raises(IncompatibleEnvironmentError, match="Invalid toolchain and device OS combination"):
        default_performer(FakeToolchain(True), FakeDevice("8.0"))


def test_default_error_names_device_version():
    with pytest.raises(IncompatibleEnvironmentError, match=r"device reports 8\.4"):
        default_performer(FakeToolchain(True), FakeDevice("8.4"))


def test_cloud_flag_must_be_exactly_one(monkeypatch):
    monkeypatch.setenv(environment.CLOUD_MODE_ENV, "true")
    assert default_performer(FakeToolchain(True), FakeDevice("9.0")) is PerformerKind.DEVICE_AGENT


def test_select_in_cloud_ignores_explicit_option(in_cloud):
    facts = ExplodingFacts()
    config = {"gesture_performer": "device_agent"}
    assert select_performer(config, facts, facts) is PerformerKind.INSTRUMENTS


def test_select_in_cloud_ignores_invalid_option(in_cloud):
    facts = ExplodingFacts()
    config = {"gesture_performer": "unknown_performer"}
    assert select_performer(config, facts, facts) is PerformerKind.INSTRUMENTS


def test_select_explicit_instruments_on_xcode_below_8():
    device = ExplodingFacts()
    config = {"gesture_performer": "instruments"}
    assert select_performer(config, FakeToolchain(False), device) is PerformerKind.INSTRUMENTS


def test_select_explicit_instruments_on_xcode_8_raises():
    config = {"gesture_performer": PerformerKind.INSTRUMENTS}
    with pytest.raises(IncompatibleOptionError, match="Incompatible gesture_performer option for active toolchain"):
        select_performer(config, FakeToolchain(True), FakeDevice("10.0"))


def test_select_explicit_device_agent_on_ios_8_raises():
    config = {"gesture_performer": "device_agent"}
    with pytest.raises(IncompatibleEnvironmentError, match="Invalid toolchain and device OS combination"):
        select_performer(config, FakeToolchain(True), FakeDevice("8.0"))


def test_select_explicit_device_agent_on_ios_9():
    config = {"gesture_performer": "device_agent"}
    assert select_performer(config, FakeToolchain(True), FakeDevice("9.0")) is PerformerKind.DEVICE_AGENT


def test_select_explicit_device_agent_on_xcode_below_8_is_accepted():
    config = {"gesture_performer": "device_agent"}
    assert select_performer(config, FakeToolchain(False), FakeDevice("9.3")) is PerformerKind.DEVICE_AGENT


def test_select_unknown_option_raises_without_reading_facts():
    facts = ExplodingFacts()
    config = {"gesture_performer": "unknown_performer"}
    with pytest.raises(InvalidOptionError, match="Invalid gesture_performer option:"):
        select_performer(config, facts, facts)


def test_select_non_string_option_is_invalid():
    with pytest.raises(InvalidOptionError, match="Invalid gesture_performer option:"):
        select_performer({"gesture_performer": 1}, FakeToolchain(True), FakeDevice("9.0"))


def test_select_without_option_delegates_to_default(monkeypatch):
    seen = []

    def fake_default(toolchain, device, *, cloud=None):
        seen.append((toolchain, device, cloud))
        return "performer"

    monkeypatch.setattr(policy, "default_performer", fake_default)
    toolchain = FakeToolchain(True)
    device = FakeDevice("9.0")
    assert select_performer({}, toolchain, device) == "performer"
    assert seen == [(toolchain, device, False)]


@pytest.mark.parametrize("config", [{}, {"gesture_performer": "device_agent"}])
def test_select_reads_cloud_flag_once(monkeypatch, config):
    reads = []

    def counting_cloud_mode(env=None):
        reads.append(env)
        return False

    monkeypatch.setattr(environment, "cloud_mode", counting_cloud_mode)
    assert select_performer(config, FakeToolchain(True), FakeDevice("9.0")) is PerformerKind.DEVICE_AGENT
    assert len(reads) == 1


def test_default_uses_passed_cloud_flag_without_reading_environment(monkeypatch):
    def no_cloud_read(env=None):
        raise AssertionError("environment read")

    monkeypatch.setattr(environment, "cloud_mode", no_cloud_read)
    facts = ExplodingFacts()
    assert default_performer(facts, facts, cloud=True) is PerformerKind.INSTRUMENTS
    assert default_performer(FakeToolchain(False), facts, cloud=False) is PerformerKind.INSTRUMENTS


def test_override_guards_read_facts_through_callables():
    for guard in policy.OVERRIDE_GUARDS:
        assert callable(guard.fact)
        assert guard.fact in (policy._Facts.toolchain_tier, policy._Facts.device_tier)
    facts = policy._Facts(FakeToolchain(True), FakeDevice("8.0"))
    readings = [guard.fact(facts) for guard in policy.OVERRIDE_GUARDS]
    assert readings == [policy.ToolchainTier.MODERN, policy.DeviceTier.PRE_IOS_9]


def test_each_fact_is_read_once_per_call():
    toolchain = FakeToolchain(True)
    device = FakeDevice("9.0")
    facts = policy._Facts(toolchain, device)
    facts.toolchain_tier()
    facts.toolchain_tier()
    facts.device_tier()
    facts.device_tier()
    assert toolchain.calls == 1
    assert device.calls == 1


def test_select_without_option_propagates_default_failure():
    with pytest.raises(IncompatibleEnvironmentError):
        select_performer({"device": object()}, FakeToolchain(True), FakeDevice("8.0"))


def test_select_none_option_counts_as_absent():
    config = {"gesture_performer": None}
    assert select_performer(config, FakeToolchain(False), FakeDevice("8.0")) is PerformerKind.INSTRUMENTS


def test_select_does_not_mutate_config():
    handle = object()
    config = {"gesture_performer": "device_agent", "device": handle}
    select_performer(config, FakeToolchain(True), FakeDevice("9.0"))
    assert config == {"gesture_performer": "device_agent", "device": handle}
    assert config["device"] is handle


@pytest.mark.parametrize(
    ("gte_8", "device_version", "expected"),
    [
        (False, "7.1", PerformerKind.INSTRUMENTS),
        (False, "10.0", PerformerKind.INSTRUMENTS),
        (True, "9.0", PerformerKind.DEVICE_AGENT),
        (True, "11.2.1", PerformerKind.DEVICE_AGENT),
    ],
)
def test_default_matrix(gte_8, device_version, expected):
    assert default_performer(FakeToolchain(gte_8), FakeDevice(device_version)) is expected


def test_default_rules_cover_every_consulted_tier():
    for tier in policy.ToolchainTier:
        if tier in policy.DEVICE_CONSULTED:
            for device_tier in policy.DeviceTier:
                assert (tier, device_tier) in policy.DEFAULT_RULES
        else:
            assert (tier, None) in policy.DEFAULT_RULES


def test_describe_decision_default_source():
    report = describe_decision({}, FakeToolchain(True), FakeDevice("9.0"))
    assert report["ok"] is True
    assert report["gesture_performer"] == "device_agent"
    assert report["source"] == "default"
    assert report["error"] is None


def test_describe_decision_option_source():
    report = describe_decision({"gesture_performer": "instruments"}, FakeToolchain(False), FakeDevice("8.0"))
    assert report["ok"] is True
    assert report["source"] == "option"
    assert report["requested"] == "instruments"


def test_describe_decision_cloud_source(in_cloud):
    report = describe_decision({"gesture_performer": "device_agent"}, ExplodingFacts(), ExplodingFacts())
    assert report["cloud_mode"] is True
    assert report["gesture_performer"] == "instruments"
    assert report["source"] == "cloud"


def test_describe_decision_reports_failure():
    report = describe_decision({"gesture_performer": "instruments"}, FakeToolchain(True), FakeDevice("9.0"))
    assert report["ok"] is False
    assert report["gesture_performer"] is None
    assert report["error_kind"] == "IncompatibleOption"
    assert report["error"].startswith("IncompatibleOptionError: Incompatible gesture_performer option")
