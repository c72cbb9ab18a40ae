"""Test the client command handler over an in-process channel."""

import asyncio

from loadclient.core.config import ClientConfig
from loadclient.core.results import TxStats
from loadclient.worker.channel import QueueChannel
from loadclient.worker.handler import ClientHandler


TARGET = {
    "name": "sim",
    "targetClass": "loadclient.drivers.simulated.SimulatedTarget",
    "settings": {"latency_ms": 0, "seed": 7},
}
CONFIG = ClientConfig(update_interval=0.01, result_delay=0)


def _test_message(**fields):
    message = {
        "type": "test",
        "workloadModule": "loadclient.workloads.simple:SimpleWorkload",
        "targetConfig": TARGET,
        "label": "query",
    }
    message.update(fields)
    return message


async def _exchange(*messages, config=CONFIG):
    """Serve the given messages followed by a stop command; return every outgoing event."""
    worker_side, controller_side = QueueChannel.pair()
    handler = ClientHandler(worker_side, config)
    for message in messages:
        controller_side.send(message)
    controller_side.send({"type": "stop"})

    await handler.serve()
    worker_side.close()

    events = []
    while True:
        event = await controller_side.receive()
        if event is None:
            return events
        events.append(event)


def _final(events):
    return [e for e in events if e["type"] in ("result", "error")]


class TestClientHandler:
    """Test command handling."""

    def test_fixed_number_test(self):
        events = asyncio.run(_exchange(_test_message(count=5)))

        final = _final(events)
        assert len(final) == 1
        assert final[0]["type"] == "result"
        assert isinstance(final[0]["data"], TxStats)
        assert final[0]["data"].succ == 5
        assert final[0]["data"].fail == 0
        assert events[-1] is final[0]

        progress = [e for e in events if e["type"] == "progress"]
        assert sum(e["data"]["submittedDelta"] for e in progress) == 5

    def test_count_trim(self):
        events = asyncio.run(_exchange(_test_message(count=6, trim=2)))

        result = _final(events)[0]["data"]
        assert result.succ == 4

    def test_batched_workload_submits_exact_count(self):
        events = asyncio.run(_exchange(_test_message(count=4, workloadArgs={"batch": 2})))

        result = _final(events)[0]
        assert result["type"] == "result"
        assert result["data"].succ == 4
        progress = [e for e in events if e["type"] == "progress"]
        assert sum(e["data"]["submittedDelta"] for e in progress) == 4

    def test_zero_duration_test(self):
        events = asyncio.run(_exchange(_test_message(durationSeconds=0)))

        assert events == [{"type": "result", "data": TxStats.null()}]

    def test_duration_test_with_rate_control(self):
        message = _test_message(durationSeconds=0.2, rateControlConfig={"type": "fixed-rate", "opts": {"tps": 50}})

        events = asyncio.run(_exchange(message))

        result = _final(events)[0]
        assert result["type"] == "result"
        assert 0 < result["data"].succ <= 12

    def test_unknown_message_type(self):
        events = asyncio.run(_exchange({"type": "dance"}, "not a mapping", _test_message(count=1)))

        final = _final(events)
        assert [e["type"] for e in final] == ["error", "error", "result"]
        assert final[0]["data"] == "unknown message type"

    def test_malformed_test_command(self):
        events = asyncio.run(_exchange({"type": "test", "count": 5}))

        assert len(events) == 1
        assert events[0]["type"] == "error"
        assert "malformed test command" in events[0]["data"]

    def test_concurrent_test_is_rejected(self):
        events = asyncio.run(_exchange(_test_message(count=3), _test_message(count=3)))

        final = _final(events)
        assert [e["type"] for e in final] == ["error", "result"]
        assert "already running" in final[0]["data"]
        assert final[1]["data"].succ == 3

    def test_unloadable_workload(self):
        events = asyncio.run(_exchange(_test_message(count=1, workloadModule="no.such.workload")))

        assert [e["type"] for e in events] == ["error"]
        assert "no.such.workload" in events[0]["data"]

    def test_failing_workload_init(self):
        events = asyncio.run(_exchange(_test_message(count=1, workloadArgs={"batch": 0})))

        assert [e["type"] for e in events] == ["error"]
        assert "initialization failed" in events[0]["data"]

    def test_handler_serves_after_error(self):
        async def scenario():
            worker_side, controller_side = QueueChannel.pair()
            handler = ClientHandler(worker_side, CONFIG)
            await handler.handle(_test_message(count=1, rateControlConfig={"type": "warp-speed"}))
            await handler.wait_idle()
            await handler.handle(_test_message(count=2))
            await handler.wait_idle()
            worker_side.close()

            events = []
            event = await controller_side.receive()
            while event is not None:
                events.append(event)
                event = await controller_side.receive()
            return events

        final = _final(asyncio.run(scenario()))
        assert [e["type"] for e in final] == ["error", "result"]
        assert "warp-speed" in final[0]["data"]

    def test_serve_ends_when_channel_closes(self):
        async def scenario():
            worker_side, controller_side = QueueChannel.pair()
            handler = ClientHandler(worker_side, CONFIG)
            controller_side.close()
            await asyncio.wait_for(handler.serve(), timeout=5)
            return handler

        handler = asyncio.run(scenario())
        assert not handler.busy

    def test_send_failure_is_logged(self):
        async def scenario():
            worker_side, controller_side = QueueChannel.pair()
            handler = ClientHandler(worker_side, CONFIG)
            worker_side.close()
            await handler.handle({"type": "dance"})

        asyncio.run(scenario())
