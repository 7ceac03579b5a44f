import pytest
from hypothesis import given, strategies as st

import umf_codec
import umf_record
import umf_smear


MASK = (0x4E25, 0xF4A1, 0x5437, 0xAB41, 0x0000)
FIELDS = [0x1234, 0x5678, 0x0001, 0x0002]
ENCODED = '62C5-CA75-3C9B-C3EC-68AF'


def test_encode_pads_and_uppercases():
    assert umf_codec.encode_id([0x6F9, 0x4E25, 0xF, 0, 0xAB41]) == \
        '06F9-4E25-000F-0000-AB41'


def test_concrete_scenario():
    record = umf_record.build_record(FIELDS)
    assert record[-1] == 0x68AF

    uid = umf_codec.encode_id(umf_smear.smear(record, MASK))
    assert uid == ENCODED
    assert len(uid) == 24
    assert uid == uid.upper()

    assert umf_codec.unpack_id(uid, MASK) == (record, None)


@given(st.lists(st.integers(min_value=0, max_value=0xFFFF),
                min_size=1, max_size=10))
def test_decode_encode_round_trip(record):
    uid = umf_codec.encode_id(record)
    assert len(uid) == 5 * len(record) - 1
    assert umf_codec.decode_id(uid, len(record)) == (record, None)


def test_decode_accepts_lowercase_and_short_tokens():
    assert umf_codec.decode_id('6f9-4e25-f-0-ab41', 5) == \
        ([0x6F9, 0x4E25, 0xF, 0, 0xAB41], None)


@pytest.mark.parametrize('uid', [
    '',
    'not-a-valid-id',
    '06F9-4E25-F4A1-5437',
    '06F9-4E25-F4A1-5437-AB41-0000',
    '06F9--F4A1-5437-AB41',
    '06F9-4E25-F4A1-5437-AB41-',
    '06F9-4E25-F4G1-5437-AB41',
    '06F9-4E25-0x41-5437-AB41',
    '06F9-4E25-+F41-5437-AB41',
    '06F9-4E25- F41-5437-AB41',
    '06F9-4E25-F_41-5437-AB41',
    '06F9-4E25-1F4A1-5437-AB41',
    '06F9-4E25-000F4-5437-AB41',
    None,
    12345,
])
def test_decode_rejects_malformed(uid):
    assert umf_codec.decode_id(uid, 5) == (None, umf_codec.ERR_MALFORMED)


def test_unpack_checksum_mismatch():
    record = umf_smear.smear(umf_record.build_record(FIELDS), MASK)
    record[0] ^= 0x0001
    uid = umf_codec.encode_id(record)
    assert umf_codec.unpack_id(uid, MASK) == (None, umf_codec.ERR_CHECKSUM)


def test_unpack_wrong_mask():
    other_mask = (0x4E25, 0xF4A1, 0x5437, 0xAB41, 0x0001)
    assert umf_codec.unpack_id(ENCODED, other_mask) == \
        (None, umf_codec.ERR_CHECKSUM)


def test_unpack_or_raise():
    assert umf_codec.unpack_id_or_raise(ENCODED, MASK) == \
        umf_record.build_record(FIELDS)

    with pytest.raises(umf_codec.UMFDecodeError) as exc_info:
        umf_codec.unpack_id_or_raise('xyz', MASK)
    assert exc_info.value.kind == umf_codec.ERR_MALFORMED

    with pytest.raises(umf_codec.UMFDecodeError) as exc_info:
        umf_codec.unpack_id_or_raise('0000-0000-0000-0000-0001', MASK)
    assert exc_info.value.kind == umf_codec.ERR_CHECKSUM
