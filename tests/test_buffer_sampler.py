from src.agents.node import MessageBuffer
from src.instrumentation.buffer_sampler import BufferSampler, DropCounters, buffer_occupancy
from src.protocols.dtn_protocol import MessageClass

from helpers import make_message


def test_average_and_max():
    sampler = BufferSampler()
    for value in (10, 20, 30):
        sampler.sample(value)

    assert sampler.average() == 20.0
    assert f"{sampler.average():.2f}" == "20.00"
    assert sampler.maximum == 30


def test_average_without_samples_is_zero():
    assert BufferSampler().average() == 0.0


def test_reset():
    sampler = BufferSampler()
    sampler.sample(500)
    sampler.reset()

    assert (sampler.total_bytes, sampler.samples, sampler.maximum) == (0, 0, 0)


def test_bounded_occupancy_uses_free_capacity():
    assert buffer_occupancy(1000, 250, [("M1", 999)]) == 750


def test_unbounded_occupancy_sums_held_messages():
    buffer = MessageBuffer(capacity=None)
    buffer.add(make_message("M1", 120))
    buffer.add(make_message("F2", 80))

    assert buffer_occupancy(buffer.capacity(), buffer.free_capacity(), buffer.held_messages()) == 200


def test_drop_counters_per_class():
    drops = DropCounters()
    drops.record_drop(MessageClass.NORMAL)
    drops.record_drop(MessageClass.FLOOD)
    drops.record_drop(MessageClass.FLOOD)
    drops.record_drop(MessageClass.NEITHER)

    assert (drops.normal, drops.flood) == (1, 2)
    drops.reset()
    assert (drops.normal, drops.flood) == (0, 0)
