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

import struct
from Crypto.Util.strxor import strxor


def _pack16(values) -> bytes:
    return struct.pack('<%dH' % len(values), *values)


def _unpack16(data: bytes) -> list:
    return list(struct.unpack('<%dH' % (len(data) // 2), data))


def apply_mask(record, mask) -> list:
    """XOR record slots with mask"""

    if len(record) != len(mask):
        raise ValueError('Record and mask lengths differ')

    if not record:
        return []

    return _unpack16(strxor(_pack16(record), _pack16(mask)))


def smear(record, mask) -> list:
    """Obfuscate record.
    Each slot is XORed with all the slots that follow it, then with mask"""

    record = list(record)
    n = len(record)

    # Slot i becomes XOR of original slots i..n-1
    for i in range(n):
        for j in range(i + 1, n):
            record[i] ^= record[j]

    return apply_mask(record, mask)


def unsmear(record, mask) -> list:
    """Deobfuscate record"""

    record = apply_mask(record, mask)
    n = len(record)

    # Restore from the last slot down, slots above i are already restored
    for i in range(n - 1, -1, -1):
        for j in range(i + 1, n):
            record[i] ^= record[j]

    return record
