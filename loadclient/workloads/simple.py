"""Workload submitting payloads to a SimulatedTarget.

Use as ``workloadModule: loadclient.workloads.simple:SimpleWorkload``.
Arguments:
    payload_size: size in bytes of the generated payload (default 64)
    batch: operations submitted per work unit (default 1)
"""

from ..drivers.base import Workload
from ..utils.logging import LoggerMixin


class SimpleWorkload(LoggerMixin, Workload):

    info = "simple payload submission"

    def __init__(self):
        super().__init__()
        self.context = None
        self.payload = b""
        self.batch = 1

    async def init(self, context, args):
        self.context = context
        self.payload = b'x' * int(args.get('payload_size', 64))
        self.batch = int(args.get('batch', 1))
        if self.batch < 1:
            raise ValueError("batch must be at least 1")
        self.logger.info(f"Initialized with batch={self.batch}, payload={len(self.payload)} bytes")

    async def run(self):
        if self.batch == 1:
            return await self.context.submit(self.payload)
        return await self.context.submit_batch([self.payload] * self.batch)

    async def end(self):
        self.context = None
