"""Unit tests for Message, events and EventQueue."""

import dataclasses

import pytest

from lockstepsim.core.errors import EmptyEventQueueError
from lockstepsim.core.events import EventQueue, Message, MessageArrived, UpdateCycleDue


class TestMessage:
    """Tests for Message dataclass."""

    def test_message_creation(self):
        msg = Message(target_cycle=4, sending_client=0, dest_client=1)
        assert msg.target_cycle == 4
        assert msg.sending_client == 0
        assert msg.dest_client == 1

    def test_message_is_immutable(self):
        msg = Message(4, 0, 1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            msg.target_cycle = 5

    def test_describe(self):
        assert UpdateCycleDue(0, 1).describe() == "Update cycle for client 1"
        arrival = MessageArrived(10, Message(3, 0, 1))
        assert arrival.describe() == (
            "Message arrived for client 1 from client 0 for update cycle 3"
        )


class TestEventQueue:
    """Tests for EventQueue ordering."""

    def test_empty_queue(self):
        queue = EventQueue()
        assert len(queue) == 0
        assert not queue
        assert queue.peek_time() is None

    def test_pop_on_empty_raises(self):
        with pytest.raises(EmptyEventQueueError):
            EventQueue().pop_earliest()

    def test_pops_in_time_order(self):
        queue = EventQueue()
        for t in (30, 10, 20):
            queue.push(UpdateCycleDue(t, 0))

        assert queue.peek_time() == 10
        assert [queue.pop_earliest().trigger_time for _ in range(3)] == [10, 20, 30]

    def test_ties_pop_in_insertion_order(self):
        queue = EventQueue()
        first = UpdateCycleDue(5, 1)
        second = MessageArrived(5, Message(2, 0, 1))
        third = UpdateCycleDue(5, 0)
        for event in (first, second, third):
            queue.push(event)

        assert queue.pop_earliest() is first
        assert queue.pop_earliest() is second
        assert queue.pop_earliest() is third

    def test_mixed_times_and_ties(self):
        queue = EventQueue()
        a = UpdateCycleDue(16, 0)
        b = MessageArrived(0, Message(0, 1, 0))
        c = UpdateCycleDue(16, 1)
        d = MessageArrived(0, Message(0, 0, 1))
        for event in (a, b, c, d):
            queue.push(event)

        assert queue.pending() == [b, d, a, c]
        assert len(queue) == 4  # pending() does not consume

    def test_rejects_negative_time(self):
        with pytest.raises(ValueError):
            EventQueue().push(UpdateCycleDue(-1, 0))
