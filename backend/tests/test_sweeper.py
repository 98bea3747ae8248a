from wastebin.core.errors import StorageUnavailable
from wastebin.core.expiry import ExpiryPolicy
from wastebin.services.sweeper import sweep_once


def test_sweep_once_removes_expired(manager, clock):
    manager.create("gone", policy=ExpiryPolicy(expires_in=10))
    manager.create("kept")
    clock.advance(11)

    assert sweep_once(manager) == 1
    assert sweep_once(manager) == 0


def test_sweep_once_survives_storage_failure():
    class DownManager:
        def sweep(self):
            raise StorageUnavailable("down")

    assert sweep_once(DownManager()) == 0
