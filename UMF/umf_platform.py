# MIT License
#
# Copyright (c) 2023-2024 Andrey Zhdanov (rivitna)
# https://github.com/rivitna
#
# Permission is hereby granted, free of charge, to any person obtaining
# a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction, including
# without limitation the rights to use, copy, modify, merge, publish,
# distribute, sublicense, and/or sell copies of the Software, and to permit
# persons to whom the Software is furnished to do so, subject to
# the following conditions:
#
# The above copyright notice and this permission notice shall be included
# in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL
# THE AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING
# FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER
# DEALINGS IN THE SOFTWARE.

import os
import io
import sys
import struct
import logging
import platform
import psutil


logger = logging.getLogger(__name__)


MASK16 = 0xFFFF
MASK32 = 0xFFFFFFFF

CPUINFO_PATH = '/proc/cpuinfo'

# CPUID leaf 0 output: EAX, EBX, ECX, EDX
CPUID_INFO_SIZE = 16

MAC_ADDR_SIZE = 6

# Machine name is hashed in the ANSI code page on Windows
NAME_ENCODING = 'mbcs' if sys.platform == 'win32' else 'utf-8'


def hash_cpu_info(data: bytes) -> int:
    """Get CPU hash from CPUID leaf 0 output"""

    data = data[:CPUID_INFO_SIZE].ljust(CPUID_INFO_SIZE, b'\0')

    h = 0
    for v in struct.unpack('<8H', data):
        h += v
    return h & MASK16


def hash_volume_serial(serial: int) -> int:
    """Get volume serial number hash"""

    serial &= MASK32
    return (serial + (serial >> 16)) & MASK16


def hash_mac_address(addr: bytes) -> int:
    """Get MAC address hash"""

    h = 0
    for i, b in enumerate(addr):
        h += b << ((i & 1) * 8)
    return h & MASK16


def hash_machine_name(name: str, encoding: str = None) -> int:
    """Get machine name hash.
    Bytes above 0x7F are sign-extended (signed char)"""

    if encoding is None:
        encoding = NAME_ENCODING

    h = 0
    for b in name.encode(encoding, 'replace'):
        if b & 0x80:
            b |= 0xFF00
        h += b
    return h & MASK16


def parse_mac_address(s: str) -> bytes:
    """Parse MAC address string ('00:1A:2B:3C:4D:5E' or '00-1A-...')"""

    s = s.replace('-', ':').replace('.', ':')
    parts = s.split(':')
    if len(parts) == 1:
        # Plain hex string
        return bytes.fromhex(s)
    return bytes(int(p, 16) for p in parts)


def cpuid_info_from_cpuinfo(text: str) -> bytes:
    """Rebuild CPUID leaf 0 output from /proc/cpuinfo text"""

    vendor = None
    max_leaf = None

    for line in text.splitlines():

        key, sep, value = line.partition(':')
        if not sep:
            continue

        key = key.strip()
        if (key == 'vendor_id') and (vendor is None):
            vendor = value.strip()
        elif (key == 'cpuid level') and (max_leaf is None):
            max_leaf = int(value.strip())

        if (vendor is not None) and (max_leaf is not None):
            break

    if (vendor is None) or (max_leaf is None):
        raise ValueError('No CPUID data in cpuinfo')

    vendor = vendor.encode('ascii')[:12].ljust(12, b'\0')

    # Vendor string is returned in EBX, EDX, ECX
    return (struct.pack('<L', max_leaf & MASK32) +
            vendor[0:4] + vendor[8:12] + vendor[4:8])


def get_cpu_hash() -> int:
    """Get CPU hash"""

    try:
        with io.open(CPUINFO_PATH, 'rt') as f:
            text = f.read()
        return hash_cpu_info(cpuid_info_from_cpuinfo(text))

    except (OSError, ValueError) as e:
        logger.debug('CPUID data unavailable: %s', e)

    processor = platform.processor()
    if not processor:
        logger.debug('Processor name unavailable, CPU hash set to 0')
        return 0

    return hash_cpu_info(processor.encode('utf-8', 'replace'))


def get_windows_volume_serial() -> int:
    """Get Windows system volume serial number"""

    import ctypes

    root = os.environ.get('SystemRoot', 'C:\\')[:3]
    serial = ctypes.c_uint32(0)

    res = ctypes.windll.kernel32.GetVolumeInformationW(
        ctypes.c_wchar_p(root), None, 0, ctypes.byref(serial),
        None, None, None, 0)
    if not res:
        raise ctypes.WinError()

    return serial.value


def get_volume_serial() -> int:
    """Get system volume serial number"""

    if sys.platform == 'win32':
        return get_windows_volume_serial()

    # Filesystem ID of the root volume
    return os.statvfs('/').f_fsid & MASK32


def get_volume_hash() -> int:
    """Get system volume hash"""

    try:
        serial = get_volume_serial()

    except (OSError, AttributeError) as e:
        logger.debug('Volume serial number unavailable: %s', e)
        return 0

    return hash_volume_serial(serial)


def get_mac_addresses(max_count: int = 2) -> list:
    """Get hardware addresses of network adapters"""

    addrs = []

    for if_name, if_addrs in sorted(psutil.net_if_addrs().items()):

        for a in if_addrs:

            if a.family != psutil.AF_LINK:
                continue

            try:
                addr = parse_mac_address(a.address)
            except ValueError:
                continue

            # Skip loopback and empty addresses
            if (len(addr) != MAC_ADDR_SIZE) or not any(addr):
                continue

            addrs.append(addr)
            break

        if len(addrs) >= max_count:
            break

    return addrs


def get_mac_hash() -> (int, int):
    """Get hashes of two MAC addresses (sorted)"""

    try:
        addrs = get_mac_addresses(2)

    except (OSError, RuntimeError) as e:
        logger.debug('Network adapters unavailable: %s', e)
        addrs = []

    mac1 = hash_mac_address(addrs[0]) if len(addrs) > 0 else 0
    mac2 = hash_mac_address(addrs[1]) if len(addrs) > 1 else 0

    # Sort hashes, swapped adapters must not change the ID
    if mac1 > mac2:
        mac1, mac2 = mac2, mac1

    return mac1, mac2


def get_machine_name() -> str:
    """Get machine name"""

    name = platform.node()
    if not name:
        logger.debug('Machine name unavailable')
    return name


class HostSource(object):
    """Platform data source of this machine"""

    def cpu_hash(self) -> int:
        return get_cpu_hash()

    def volume_hash(self) -> int:
        return get_volume_hash()

    def mac_hashes(self) -> (int, int):
        return get_mac_hash()

    def machine_name(self) -> str:
        return get_machine_name()
