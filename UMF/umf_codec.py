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

import string
import umf_record
import umf_smear


ID_DELIMITER = '-'
ID_TOKEN_WIDTH = 4

HEX_CHARS = frozenset(string.hexdigits)


# Decode error kinds
ERR_MALFORMED = 'malformed'
ERR_CHECKSUM = 'checksum'


class UMFDecodeError(ValueError):
    """Failed to decode ID string"""

    def __init__(self, kind, msg):
        super().__init__(msg)
        self.kind = kind


def encode_id(record) -> str:
    """Encode record to ID string"""

    return ID_DELIMITER.join(('%0*X' % (ID_TOKEN_WIDTH, v)) for v in record)


def decode_id(uid, num_slots: int) -> (list, str):
    """Decode ID string to record.
    Return (record, None) or (None, error kind)"""

    if not isinstance(uid, str):
        return None, ERR_MALFORMED

    tokens = uid.split(ID_DELIMITER)
    if len(tokens) != num_slots:
        return None, ERR_MALFORMED

    record = []

    for token in tokens:

        if (len(token) == 0) or (len(token) > ID_TOKEN_WIDTH):
            return None, ERR_MALFORMED

        if not HEX_CHARS.issuperset(token):
            return None, ERR_MALFORMED

        record.append(int(token, 16))

    return record, None


def unpack_id(uid, mask) -> (list, str):
    """Decode, deobfuscate and check ID string.
    Return (record, None) or (None, error kind)"""

    record, err = decode_id(uid, len(mask))
    if record is None:
        return None, err

    record = umf_smear.unsmear(record, mask)

    # Make sure the ID is valid by looking at check digits
    if not umf_record.check_record(record):
        return None, ERR_CHECKSUM

    return record, None


def unpack_id_or_raise(uid, mask) -> list:
    """Decode, deobfuscate and check ID string, raise UMFDecodeError
    on failure"""

    record, err = unpack_id(uid, mask)
    if record is None:
        if err == ERR_CHECKSUM:
            raise UMFDecodeError(err, 'Invalid ID check digits')
        raise UMFDecodeError(err, 'Malformed ID string')

    return record
