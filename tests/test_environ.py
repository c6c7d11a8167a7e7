"""Tests for platform environment filtering."""

from microplatform.environ import filter_environment


def test_keeps_only_prefixed_entries():
    environ = {
        "PATH": "/usr/bin",
        "MICRO_REGISTRY": "mdns",
        "HOME": "/root",
        "MICRO_BROKER_ADDRESS": ":8003",
    }

    assert filter_environment(environ) == [
        "MICRO_REGISTRY=mdns",
        "MICRO_BROKER_ADDRESS=:8003",
    ]


def test_excludes_reserved_keys():
    environ = {
        "MICRO_PROFILE": "dev",
        "MICRO_STORE": "memory",
        "MICRO_PROXY": "10.0.0.1:8443",
    }

    assert filter_environment(environ) == ["MICRO_STORE=memory"]


def test_preserves_enumeration_order():
    environ = {
        "MICRO_Z": "1",
        "MICRO_A": "2",
        "OTHER": "x",
        "MICRO_M": "3",
    }

    assert filter_environment(environ) == ["MICRO_Z=1", "MICRO_A=2", "MICRO_M=3"]


def test_drops_values_containing_separator():
    environ = {
        "MICRO_TOKEN": "abc=def",
        "MICRO_NAMESPACE": "micro",
    }

    assert filter_environment(environ) == ["MICRO_NAMESPACE=micro"]


def test_keeps_empty_values():
    assert filter_environment({"MICRO_EMPTY": ""}) == ["MICRO_EMPTY="]


def test_prefix_is_case_sensitive():
    assert filter_environment({"micro_lower": "1", "Micro_Mixed": "2"}) == []


def test_empty_environment():
    assert filter_environment({}) == []


def test_defaults_to_process_environment(monkeypatch):
    monkeypatch.setenv("MICRO_FROM_PROCESS", "yes")

    assert "MICRO_FROM_PROCESS=yes" in filter_environment()
