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

import io
import logging
import threading
import umf_record
import umf_smear
import umf_codec
import umf_platform


logger = logging.getLogger(__name__)


# If we score 3 points or more, then the ID matches
MATCH_THRESHOLD = 3


def collect_fields(source, layout=umf_record.BASIC_LAYOUT) -> list:
    """Collect identification fields from platform data source"""

    mac1, mac2 = source.mac_hashes()
    if mac1 > mac2:
        mac1, mac2 = mac2, mac1

    values = {
        umf_record.FIELD_CPU: source.cpu_hash(),
        umf_record.FIELD_VOLUME: source.volume_hash(),
        umf_record.FIELD_MAC1: mac1,
        umf_record.FIELD_MAC2: mac2,
    }

    if umf_record.FIELD_MACHINE_NAME in layout:
        values[umf_record.FIELD_MACHINE_NAME] = \
            umf_platform.hash_machine_name(source.machine_name())

    return [values[name] & umf_record.MASK16 for name in layout]


class MachineRecord(object):
    """Record of this machine, computed once per process.
    reset() drops the cached record"""

    def __init__(self, source=None, layout=umf_record.BASIC_LAYOUT):
        if source is None:
            source = umf_platform.HostSource()
        self.source = source
        self.layout = tuple(layout)
        self.num_slots = umf_record.get_num_slots(self.layout)
        self._record = None
        self._lock = threading.Lock()

    def get(self) -> tuple:
        """Get (unobfuscated) record of this machine"""

        record = self._record
        if record is not None:
            return record

        with self._lock:
            if self._record is None:
                fields = collect_fields(self.source, self.layout)
                self._record = tuple(umf_record.build_record(fields))
                logger.debug('Machine record computed (%d slots)',
                             self.num_slots)
            return self._record

    def reset(self) -> None:
        """Drop cached record"""

        with self._lock:
            self._record = None


this_machine = MachineRecord()


def generate_id(mask=None, machine=None) -> str:
    """Get unique ID string of this machine"""

    if machine is None:
        machine = this_machine

    if mask is None:
        mask = umf_record.get_default_mask(machine.layout)
    umf_record.check_mask(mask, machine.num_slots)

    id_record = umf_smear.smear(machine.get(), mask)
    return umf_codec.encode_id(id_record)


def calc_match_score(record, other_record) -> int:
    """Count matching identification fields (check digits excluded)"""

    score = 0
    for i in range(min(len(record), len(other_record)) - 1):
        if record[i] == other_record[i]:
            score += 1
    return score


def compare_ids(uid, other_uid, mask=None, layout=None,
                threshold=MATCH_THRESHOLD) -> bool:
    """Check if two ID strings identify the same machine.
    Without layout the number of slots follows the mask"""

    if (layout is None) and (mask is not None):
        num_slots = len(mask)
        if num_slots < 2:
            raise umf_record.KeyLengthError('Invalid mask length: %d' %
                                            num_slots)
    else:
        if layout is None:
            layout = umf_record.BASIC_LAYOUT
        num_slots = umf_record.get_num_slots(layout)
        if mask is None:
            mask = umf_record.get_default_mask(layout)

    umf_record.check_mask(mask, num_slots)

    record, err = umf_codec.unpack_id(uid, mask)
    if record is None:
        logger.debug('Failed to unpack ID %r: %s', uid, err)
        return False

    other_record, err = umf_codec.unpack_id(other_uid, mask)
    if other_record is None:
        logger.debug('Failed to unpack ID %r: %s', other_uid, err)
        return False

    score = calc_match_score(record, other_record)
    logger.debug('ID match score: %d/%d', score, num_slots - 1)

    return (score >= threshold)


def load_mask(filename, layout=umf_record.BASIC_LAYOUT) -> tuple:
    """Load obfuscation mask (whitespace-separated hex values) from file.
    Return default mask if file not found"""

    try:
        with io.open(filename, 'rt') as f:
            mask = tuple(int(s, 16) for s in f.read().split())

    except FileNotFoundError:
        return umf_record.get_default_mask(layout)

    umf_record.check_mask(mask, umf_record.get_num_slots(layout))
    return mask


if __name__ == '__main__':
    import sys
    import os

    args = sys.argv[1:]

    layout = umf_record.BASIC_LAYOUT
    if '-n' in args:
        args.remove('-n')
        layout = umf_record.NAME_LAYOUT

    if '-v' in args:
        args.remove('-v')
        logging.basicConfig(level=logging.DEBUG)

    if (len(args) != 0) and (len(args) != 2):
        print('Usage:', os.path.basename(sys.argv[0]), '[-n] [-v] [id1 id2]')
        sys.exit(0)

    try:
        mask = load_mask('./umf_mask.txt', layout)
    except ValueError as e:
        print('Error: %s' % e)
        sys.exit(1)

    if len(args) == 0:

        machine = MachineRecord(layout=layout)
        print(generate_id(mask, machine))

    else:

        num_slots = umf_record.get_num_slots(layout)
        records = []
        for uid in args:
            record, err = umf_codec.unpack_id(uid, mask)
            if record is None:
                print('Error: Invalid ID \"%s\" (%s).' % (uid, err))
                sys.exit(1)
            records.append(record)

        score = calc_match_score(records[0], records[1])
        print('score: %d/%d' % (score, num_slots - 1))

        if compare_ids(args[0], args[1], mask, layout):
            print('IDs match')
        else:
            print('IDs do not match')
            sys.exit(1)
