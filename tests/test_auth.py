"""Tests for auth key material loading."""

from microplatform.auth import AuthProvider, KeyPair, StaticAuth, load_auth
from microplatform.config import PlatformConfig


def test_static_auth_returns_key_pair():
    keys = KeyPair(public_key="pub", private_key="priv")

    assert StaticAuth(keys).key_pair() is keys


def test_static_auth_defaults_to_empty_keys():
    assert StaticAuth().key_pair() == KeyPair(public_key="", private_key="")


def test_static_auth_satisfies_protocol():
    assert isinstance(StaticAuth(), AuthProvider)


def test_load_auth_from_environment():
    config = PlatformConfig(auth_public_key="cfg-pub", auth_private_key="cfg-priv")
    environ = {"MICRO_AUTH_PUBLIC_KEY": "env-pub", "MICRO_AUTH_PRIVATE_KEY": "env-priv"}

    keys = load_auth(config, environ=environ).key_pair()

    assert keys == KeyPair(public_key="env-pub", private_key="env-priv")


def test_load_auth_falls_back_to_config():
    config = PlatformConfig(auth_public_key="cfg-pub", auth_private_key="cfg-priv")

    keys = load_auth(config, environ={"MICRO_AUTH_PUBLIC_KEY": "env-pub"}).key_pair()

    assert keys == KeyPair(public_key="env-pub", private_key="cfg-priv")


def test_load_auth_without_keys():
    assert load_auth(PlatformConfig(), environ={}).key_pair() == KeyPair()
