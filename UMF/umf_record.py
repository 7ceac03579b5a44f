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

MASK16 = 0xFFFF


# Identification fields
FIELD_CPU = 'cpu'
FIELD_VOLUME = 'volume'
FIELD_MAC1 = 'mac1'
FIELD_MAC2 = 'mac2'
FIELD_MACHINE_NAME = 'machine_name'

# Slot layouts (checksum slot is always appended last)
BASIC_LAYOUT = (FIELD_CPU, FIELD_VOLUME, FIELD_MAC1, FIELD_MAC2)
NAME_LAYOUT = BASIC_LAYOUT + (FIELD_MACHINE_NAME,)

ALL_FIELDS = NAME_LAYOUT


DEFAULT_MASKS = {
    BASIC_LAYOUT: (0x4E25, 0xF4A1, 0x5437, 0xAB41, 0x0000),
    NAME_LAYOUT: (0x4E25, 0xF4A1, 0x5437, 0xAB41, 0x6F90, 0x0000),
}


add16 = lambda x, y: (x + y) & MASK16


class KeyLengthError(ValueError):
    """Mask does not match the record size"""


def get_num_slots(layout: tuple) -> int:
    """Get number of record slots for layout (fields + checksum)"""

    for name in layout:
        if name not in ALL_FIELDS:
            raise ValueError('Unknown field: %s' % name)

    return len(layout) + 1


def get_default_mask(layout: tuple) -> tuple:
    """Get default obfuscation mask for layout"""

    mask = DEFAULT_MASKS.get(tuple(layout))
    if mask is None:
        raise ValueError('No default mask for layout %r' % (layout,))
    return mask


def check_mask(mask, num_slots: int) -> None:
    """Check obfuscation mask"""

    if len(mask) != num_slots:
        raise KeyLengthError('Invalid mask length: %d (expected %d)' %
                             (len(mask), num_slots))

    for v in mask:
        if not isinstance(v, int) or (v < 0) or (v > MASK16):
            raise KeyLengthError('Invalid mask value: %r' % (v,))


def calc_checksum(fields) -> int:
    """Calculate check digits"""

    check = 0
    for v in fields:
        check = add16(check, v)
    return check


def build_record(fields) -> list:
    """Build record from identification fields"""

    record = [v & MASK16 for v in fields]
    record.append(calc_checksum(record))
    return record


def check_record(record) -> bool:
    """Check record check digits"""

    if len(record) < 2:
        return False

    return (calc_checksum(record[:-1]) == record[-1])
