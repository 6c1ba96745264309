"""
Tests for the circular history buffer.

Covers:
- Construction and size validation
- Push / eviction order
- Resize (grow, shrink, zero, failed resize leaves state alone)
- Clear
"""

import math

import pytest

from snooplogg.buffer import HistoryBuffer, check_size


# ═══════════════════════════════════════════════════════════════════
#  Construction
# ═══════════════════════════════════════════════════════════════════

class TestConstruction:
    def test_default_capacity(self):
        buf = HistoryBuffer()
        assert buf.max_size == 10
        assert buf.size == 0
        assert len(buf) == 0
        assert list(buf) == []

    def test_float_truncated(self):
        assert HistoryBuffer(3.9).max_size == 3

    @pytest.mark.parametrize("value", ["10", None, True, [], object()])
    def test_non_number_rejected(self, value):
        with pytest.raises(TypeError, match="to be a number"):
            HistoryBuffer(value)

    @pytest.mark.parametrize("value", [-1, -0.5, math.nan])
    def test_negative_or_nan_rejected(self, value):
        with pytest.raises(ValueError, match="zero or greater"):
            HistoryBuffer(value)

    def test_infinite_rejected(self):
        with pytest.raises(ValueError, match="finite"):
            check_size(math.inf, "max size")


# ═══════════════════════════════════════════════════════════════════
#  Push
# ═══════════════════════════════════════════════════════════════════

class TestPush:
    def test_push_in_order(self):
        buf = HistoryBuffer(5)
        for i in range(3):
            buf.push(i)
        assert list(buf) == [0, 1, 2]
        assert buf.size == 3

    def test_overflow_evicts_oldest(self):
        buf = HistoryBuffer(3)
        for i in range(5):
            buf.push(i)
        assert list(buf) == [2, 3, 4]
        assert len(buf) == 3

    def test_size_never_exceeds_capacity(self):
        buf = HistoryBuffer(4)
        for i in range(50):
            buf.push(i)
            assert buf.size <= buf.max_size
        assert list(buf) == [46, 47, 48, 49]

    def test_zero_capacity_ignores_pushes(self):
        buf = HistoryBuffer(0)
        buf.push("a").push("b")
        assert buf.size == 0
        assert list(buf) == []

    def test_head_tracks_newest(self):
        buf = HistoryBuffer(3)
        buf.push("a")
        assert buf.head == 0
        buf.push("b")
        assert buf.head == 1
        buf.push("c").push("d")
        assert buf.head == 0

    def test_iteration_restartable(self):
        buf = HistoryBuffer(2)
        buf.push(1).push(2)
        assert list(buf) == list(buf) == [1, 2]


# ═══════════════════════════════════════════════════════════════════
#  Resize
# ═══════════════════════════════════════════════════════════════════

class TestResize:
    def test_shrink_keeps_newest(self):
        buf = HistoryBuffer(5)
        for i in range(5):
            buf.push(i)
        buf.max_size = 2
        assert list(buf) == [3, 4]
        assert buf.max_size == 2

    def test_grow_keeps_everything(self):
        buf = HistoryBuffer(3)
        for i in range(5):
            buf.push(i)
        buf.resize(10)
        assert list(buf) == [2, 3, 4]
        buf.push(5)
        assert list(buf) == [2, 3, 4, 5]

    def test_resize_to_zero_empties(self):
        buf = HistoryBuffer(3)
        buf.push(1)
        buf.resize(0)
        assert buf.size == 0
        assert list(buf) == []

    def test_failed_resize_leaves_state(self):
        buf = HistoryBuffer(3)
        buf.push(1).push(2)
        with pytest.raises(ValueError):
            buf.resize(-1)
        with pytest.raises(TypeError):
            buf.max_size = "big"
        assert buf.max_size == 3
        assert list(buf) == [1, 2]


# ═══════════════════════════════════════════════════════════════════
#  Clear
# ═══════════════════════════════════════════════════════════════════

class TestClear:
    def test_clear_keeps_capacity(self):
        buf = HistoryBuffer(3)
        buf.push(1).push(2).clear()
        assert buf.size == 0
        assert buf.max_size == 3
        buf.push(9)
        assert list(buf) == [9]
