import pytest

import umf_id
import umf_record


class FakeSource(object):
    """Deterministic platform data source"""

    def __init__(self, cpu=0x1234, volume=0x5678, macs=(0x0001, 0x0002),
                 name='TESTBOX'):
        self.cpu = cpu
        self.volume = volume
        self.macs = macs
        self.name = name
        self.calls = 0

    def cpu_hash(self):
        self.calls += 1
        return self.cpu

    def volume_hash(self):
        return self.volume

    def mac_hashes(self):
        return self.macs

    def machine_name(self):
        return self.name


@pytest.fixture
def fake_source():
    return FakeSource()


def make_id(source, layout=umf_record.BASIC_LAYOUT, mask=None):
    machine = umf_id.MachineRecord(source, layout)
    return umf_id.generate_id(mask, machine)
