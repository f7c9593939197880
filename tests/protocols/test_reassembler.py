# tests/protocols/test_reassembler.py
"""
测试流重组器。
重点验证:
1. 切分无关性：同一字节流无论如何切块，得到的帧序列都相同。
2. 等待状态：不足 3 字节、帧后残留 1-2 字节时只等待，不报错。
3. 合并读取：一个数据块内的多个帧在一次 feed 中全部返回。
"""

import pytest

from openttd_admin.exceptions import MalformedHeader
from openttd_admin.protocols.codec import Frame, encode_frame
from openttd_admin.protocols.reassembler import StreamReassembler

# 构造测试字节流: 不同长度 (含空载荷、长度字段跨 256) 的帧首尾相接
FRAMES = [
    (103, b"\x02\x01\x00\x00\x40\x00\x00"),
    (105, b""),
    (107, b"\x10\x27\x0a\x00"),
    (120, b"\x01\x00" + b"A" * 300 + b"\x00"),
    (126, b"\x2a\x00\x00\x00"),
]
STREAM = b"".join(encode_frame(t, p) for t, p in FRAMES)


def _expected() -> list[Frame]:
    return [Frame(len(p) + 3, t, p) for t, p in FRAMES]


def _feed_all(chunks) -> list[Frame]:
    reassembler = StreamReassembler()
    frames: list[Frame] = []
    for chunk in chunks:
        frames.extend(reassembler.feed(chunk))
    assert len(reassembler) == 0
    assert reassembler.expected_length is None
    return frames


def test_single_chunk():
    assert _feed_all([STREAM]) == _expected()


def test_one_byte_at_a_time():
    assert _feed_all([STREAM[i : i + 1] for i in range(len(STREAM))]) == _expected()


def test_every_two_way_split():
    """测试所有二分切点"""
    for cut in range(len(STREAM) + 1):
        assert _feed_all([STREAM[:cut], STREAM[cut:]]) == _expected(), cut


@pytest.mark.parametrize("size", [2, 3, 4, 5, 7, 64])
def test_fixed_size_chunks(size):
    chunks = [STREAM[i : i + size] for i in range(0, len(STREAM), size)]
    assert _feed_all(chunks) == _expected()


def test_example_frame():
    reassembler = StreamReassembler()
    frames = reassembler.feed(bytes([0x06, 0x00, 0x02, 0xAA, 0xBB, 0xCC]))
    assert frames == [Frame(length=6, packet_type=2, payload=b"\xaa\xbb\xcc")]


@pytest.mark.parametrize("data", [b"", b"\x06", b"\x06\x00"])
def test_less_than_header_waits(data):
    reassembler = StreamReassembler()
    assert reassembler.feed(data) == []
    assert reassembler.pending == data
    assert reassembler.expected_length is None


@pytest.mark.parametrize("leftover", [b"\x09", b"\x09\x00"])
def test_frame_with_short_leftover_waits(leftover):
    """帧后只残留 1-2 字节时，不能读取下一个帧头"""
    reassembler = StreamReassembler()
    frames = reassembler.feed(encode_frame(105) + leftover)

    assert frames == [Frame(3, 105, b"")]
    assert reassembler.pending == leftover
    assert reassembler.expected_length is None

    # 补齐剩余字节后正常产出下一帧
    rest = encode_frame(107, b"\x01\x02\x03\x04\x05\x06")[len(leftover) :]
    assert reassembler.feed(rest) == [Frame(9, 107, b"\x01\x02\x03\x04\x05\x06")]


def test_two_frames_in_one_chunk():
    reassembler = StreamReassembler()
    frames = reassembler.feed(encode_frame(105) + encode_frame(126, b"\x01\x00\x00\x00"))
    assert [f.packet_type for f in frames] == [105, 126]


def test_partial_frame_keeps_expected_length():
    reassembler = StreamReassembler()
    data = encode_frame(119, b"hello world")
    assert reassembler.feed(data[:5]) == []
    assert reassembler.expected_length == len(data)
    assert len(reassembler) == 5
    assert reassembler.feed(data[5:]) == [Frame(len(data), 119, b"hello world")]


def test_zero_length_chunks_are_noops():
    reassembler = StreamReassembler()
    data = encode_frame(107, b"\x00\x00\x00\x00")
    assert reassembler.feed(b"") == []
    assert reassembler.feed(data[:2]) == []
    assert reassembler.feed(b"") == []
    assert reassembler.feed(data[2:]) == [Frame(7, 107, b"\x00\x00\x00\x00")]
    assert reassembler.feed(b"") == []


def test_reset_discards_pending():
    reassembler = StreamReassembler()
    reassembler.feed(encode_frame(119, b"abc")[:4])
    reassembler.reset()
    assert reassembler.pending == b""
    assert reassembler.expected_length is None
    assert reassembler.feed(encode_frame(105)) == [Frame(3, 105, b"")]


def test_independent_instances():
    """两个实例之间不共享缓冲"""
    a, b = StreamReassembler(), StreamReassembler()
    a.feed(b"\x05\x00")
    assert b.feed(encode_frame(105)) == [Frame(3, 105, b"")]
    assert a.pending == b"\x05\x00"


@pytest.mark.parametrize("bad_length", [b"\x00\x00", b"\x02\x00"])
def test_declared_length_below_header_is_malformed(bad_length):
    reassembler = StreamReassembler()
    with pytest.raises(MalformedHeader):
        reassembler.feed(bad_length + b"\x01")


def test_frames_before_corrupt_header_are_delivered():
    """同一数据块中损坏帧头之前的完整帧不会丢失"""
    reassembler = StreamReassembler()

    frames = reassembler.feed(encode_frame(105) + b"\x01\x00\x07")

    assert frames == [Frame(3, 105, b"")]
    assert isinstance(reassembler.error, MalformedHeader)
    with pytest.raises(MalformedHeader):
        reassembler.feed(encode_frame(106))


def test_reset_clears_error():
    reassembler = StreamReassembler()
    with pytest.raises(MalformedHeader):
        reassembler.feed(b"\x00\x00\x01")
    assert reassembler.error is not None

    reassembler.reset()
    assert reassembler.error is None
    assert reassembler.feed(encode_frame(105)) == [Frame(3, 105, b"")]
