import io
import json

import pytest

from cmdstream.errors import InternalError, StreamCorrupt, StreamExhausted
from cmdstream.streams.jarray import WrappedArrayStream

RECORDS = [
    {"id": "conf", "entry_state": "NONE", "data": {"modules": [{"name": "m1", "n": 3}]}},
    {"id": "start", "data": {"run": 42, "enabled": True, "ratio": 0.25, "note": None}},
    {"id": "stop", "data": {}},
]


def test_put_flush_then_read_back_in_order(tmp_path):
    path = tmp_path / "cmds.json"
    with WrappedArrayStream(str(path), open(path, "wb"), reading=False) as w:
        for r in RECORDS:
            w.put(r)
        # nothing is written before flush
        assert path.read_bytes() == b""
        w.flush()
        assert not w.arr

    with WrappedArrayStream(str(path), open(path, "rb")) as r:
        assert [r.get() for _ in RECORDS] == RECORDS
        with pytest.raises(StreamExhausted):
            r.get()


def test_close_flushes_pending_records(tmp_path):
    path = tmp_path / "cmds.json"
    w = WrappedArrayStream(str(path), open(path, "wb"), reading=False)
    w.put({"a": 1})
    w.close()
    assert json.loads(path.read_text()) == [{"a": 1}]


def test_each_flush_writes_its_own_array():
    buf = io.BytesIO()
    w = WrappedArrayStream("mem", buf, reading=False)
    w.put({"a": 1})
    w.flush()
    w.flush()  # empty, nothing written
    w.put({"b": 2})
    w.flush()
    assert buf.getvalue() == b'[{"a":1}][{"b":2}]'


def test_empty_array_is_exhausted():
    r = WrappedArrayStream("mem", io.BytesIO(b" [ ] "))
    with pytest.raises(StreamExhausted):
        r.get()


@pytest.mark.parametrize("content", [b"", b"[{}", b'{"a": 1}', b"42", b'[{"a": 1}] [{"b": 2}]'])
def test_bad_container_is_corrupt_at_construction(content):
    with pytest.raises(StreamCorrupt):
        WrappedArrayStream("mem", io.BytesIO(content))


def test_non_map_element_is_corrupt():
    r = WrappedArrayStream("mem", io.BytesIO(b'[{"a": 1}, [1, 2], {"b": 2}]'))
    assert r.get() == {"a": 1}
    with pytest.raises(StreamCorrupt):
        r.get()
    # the bad element was consumed
    assert r.get() == {"b": 2}


def test_reading_stream_never_writes_back(tmp_path):
    path = tmp_path / "cmds.json"
    path.write_text(json.dumps(RECORDS))
    r = WrappedArrayStream(str(path), open(path, "rb"))
    assert r.get() == RECORDS[0]
    r.close()
    assert json.loads(path.read_text()) == RECORDS


def test_flush_to_closed_handle_is_internal_error():
    buf = io.BytesIO()
    w = WrappedArrayStream("mem", buf, reading=False)
    w.put({"a": 1})
    buf.close()
    with pytest.raises(InternalError):
        w.flush()


def test_deep_nesting_is_corrupt():
    deep = b"[" + b'{"a":' * 100_000 + b"1" + b"}" * 100_000 + b"]"
    with pytest.raises(StreamCorrupt, match="nesting too deep"):
        WrappedArrayStream("mem", io.BytesIO(deep))


@pytest.mark.parametrize("token", [b"NaN", b"Infinity", b"-Infinity"])
def test_non_json_constants_are_corrupt(token):
    with pytest.raises(StreamCorrupt):
        WrappedArrayStream("mem", io.BytesIO(b'[{"a": ' + token + b"}]"))


def test_put_rejects_non_finite_floats():
    buf = io.BytesIO()
    w = WrappedArrayStream("mem", buf, reading=False)
    with pytest.raises(StreamCorrupt):
        w.put({"a": float("nan")})
    w.flush()
    assert buf.getvalue() == b""


def test_put_snapshots_the_record():
    buf = io.BytesIO()
    w = WrappedArrayStream("mem", buf, reading=False)
    record = {"id": "conf", "args": {"n": 1}}
    w.put(record)
    record["args"]["n"] = 2
    record["extra"] = True
    w.flush()
    assert json.loads(buf.getvalue()) == [{"id": "conf", "args": {"n": 1}}]
