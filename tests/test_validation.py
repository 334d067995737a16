import pytest

from edgectl.validation import is_local_device, validate_dot_local_url, validate_ip_address


@pytest.mark.parametrize("value", ["192.168.0.31", "10.0.0.1", "::1", "fe80::1"])
def test_ip_addresses(value):
    assert validate_ip_address(value)


@pytest.mark.parametrize("value", ["23c73a1", "192.168.0", "256.1.1.1", "", None, "host.local"])
def test_not_ip_addresses(value):
    assert not validate_ip_address(value)


@pytest.mark.parametrize("value", ["23c73a1.local", "my-device.lan.local", "ABC.LOCAL"])
def test_dot_local_hostnames(value):
    assert validate_dot_local_url(value)


@pytest.mark.parametrize("value", ["local", ".local", "23c73a1", "device.localhost", "a_b.local", None])
def test_not_dot_local_hostnames(value):
    assert not validate_dot_local_url(value)


def test_uuid_is_not_local():
    assert not is_local_device("7cf02a687b74206f92cb455969cf8e98")
    assert is_local_device("7cf02a6.local")
