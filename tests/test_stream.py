"""Unit tests for the per-channel ring buffers."""

import numpy as np
import pytest

from mindstate.eeg.stream import ChannelBuffer, EEGStream


class TestChannelBuffer:
    def test_ordering_after_wrap(self):
        buf = ChannelBuffer(1024)
        values = np.arange(3000, dtype=np.float64)
        buf.push_many(values)
        assert np.array_equal(buf.read_newest(1024), values[-1024:])

    def test_cursor_keeps_counting(self):
        buf = ChannelBuffer(16)
        buf.push_many(range(40))
        assert buf.write_cursor == 40
        assert len(buf) == 16

    def test_read_more_than_written(self):
        buf = ChannelBuffer(1024)
        buf.push_many([1.0, 2.0, 3.0])
        assert buf.read_newest(256).tolist() == [1.0, 2.0, 3.0]

    def test_read_does_not_mutate(self):
        buf = ChannelBuffer(8)
        buf.push_many(range(5))
        first = buf.read_newest(4)
        first[:] = -1
        assert buf.read_newest(4).tolist() == [1.0, 2.0, 3.0, 4.0]
        assert buf.write_cursor == 5

    def test_read_since_cursor(self):
        buf = ChannelBuffer(8)
        buf.push_many(range(5))
        cursor = buf.write_cursor
        buf.push_many([10.0, 11.0])
        assert buf.read_since(cursor).tolist() == [10.0, 11.0]
        assert len(buf.read_since(buf.write_cursor)) == 0

    def test_read_since_after_falling_behind(self):
        """Only the last ``capacity`` samples survive a lapped reader."""
        buf = ChannelBuffer(8)
        cursor = buf.write_cursor
        buf.push_many(range(20))
        assert buf.read_since(cursor).tolist() == list(range(12, 20))

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError):
            ChannelBuffer(0)


class TestEEGStream:
    def test_capacity_from_duration(self):
        stream = EEGStream(duration=4.0)
        assert stream.capacity == 1024
        assert len(stream) == 4

    def test_out_of_range_channel_ignored(self):
        stream = EEGStream(duration=1.0)
        stream.push(4, 100.0)
        stream.push(-1, 100.0)
        stream.append(7, [1.0, 2.0])
        assert stream.total_samples() == 0

    def test_channels_are_independent(self):
        stream = EEGStream(duration=1.0)
        stream.append(1, [1.0, 2.0, 3.0])
        stream.push(2, 9.0)
        assert stream.cursors() == [0, 3, 1, 0]
        assert stream.get_window(1).tolist() == [1.0, 2.0, 3.0]
        assert stream.get_window(2, 5).tolist() == [9.0]
