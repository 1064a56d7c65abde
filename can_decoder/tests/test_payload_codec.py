import cbor2
import pytest

from can_decoder.exceptions import PayloadIncompleteError, PayloadMalformedError, PayloadDecodeError
from can_decoder.models.decoded_value import DecodedValue, ValueKind
from can_decoder.services.payload_codec import decode_prefix, to_decoded_value


def test_decode_exact_buffer():
    value, consumed = decode_prefix(b"\x82\x01\x02")
    assert consumed == 3
    assert value.kind is ValueKind.ARRAY
    assert value.to_python() == [1, 2]


def test_decode_reports_consumed_prefix_only():
    value, consumed = decode_prefix(b"\x02\x63abc")
    assert consumed == 1
    assert value == DecodedValue(ValueKind.UNSIGNED, 2)


def test_decode_map_with_trailing_bytes():
    encoded = cbor2.dumps({"id": 7, "key": b"\x00" * 9})
    value, consumed = decode_prefix(encoded + b"\xA1")
    assert consumed == len(encoded)
    assert value.kind is ValueKind.MAP
    assert value.to_python() == {"id": 7, "key": b"\x00" * 9}


def test_incomplete_buffer():
    with pytest.raises(PayloadIncompleteError):
        decode_prefix(b"\x82\x01")
    with pytest.raises(PayloadIncompleteError):
        decode_prefix(b"")


def test_malformed_buffer():
    # additional info 28 is reserved in CBOR
    with pytest.raises(PayloadMalformedError) as exc:
        decode_prefix(b"\x1c\x00")
    assert exc.value.data == b"\x1c\x00"
    assert isinstance(exc.value, PayloadDecodeError)


@pytest.mark.parametrize("item,kind", [
    (None, ValueKind.NULL),
    (True, ValueKind.BOOL),
    (False, ValueKind.BOOL),
    (5, ValueKind.UNSIGNED),
    (-5, ValueKind.SIGNED),
    (1.5, ValueKind.FLOAT),
    ("txt", ValueKind.TEXT),
    (b"\x01", ValueKind.BYTES),
    ([1, "a"], ValueKind.ARRAY),
    ({1: 2}, ValueKind.MAP),
])
def test_variant_kinds_from_encoded_values(item, kind):
    value, consumed = decode_prefix(cbor2.dumps(item))
    assert value.kind is kind
    assert consumed == len(cbor2.dumps(item))


def test_unknown_tag_kept_as_tag():
    value, _ = decode_prefix(cbor2.dumps(cbor2.CBORTag(4000, [1])))
    assert value.kind is ValueKind.TAG
    tag, inner = value.value
    assert tag == 4000
    assert inner.to_python() == [1]


def test_unknown_python_objects_become_other():
    value = to_decoded_value(object())
    assert value.kind is ValueKind.OTHER


def test_truncated_value_is_incomplete_not_malformed():
    for encoded in (cbor2.dumps([1, 2]), cbor2.dumps("hello"), cbor2.dumps({"a": b"xyz"})):
        for cut in range(1, len(encoded)):
            with pytest.raises(PayloadIncompleteError) as exc:
                decode_prefix(encoded[:cut])
            assert isinstance(exc.value.original_error, cbor2.CBORDecodeEOF)


def test_multi_byte_value_consumed_count():
    encoded = cbor2.dumps(cbor2.CBORTag(4000, "ab"))
    value, consumed = decode_prefix(encoded + b"\x05")
    assert consumed == len(encoded)
    assert value.kind is ValueKind.TAG
