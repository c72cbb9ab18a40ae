# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Command/event channels between a client worker and its controller.
"""

import asyncio
from abc import ABC, abstractmethod
from multiprocessing.connection import Connection
from typing import Any, Optional, Tuple


class Channel(ABC):
    """
    Bidirectional message channel as seen from one side.
    ``send`` never suspends so it can be called from reporter ticks.
    """

    @abstractmethod
    def send(self, message: Any):
        pass

    @abstractmethod
    async def receive(self) -> Optional[Any]:
        """Next incoming message, or None once the peer has closed."""
        pass

    @abstractmethod
    def close(self):
        pass


class QueueChannel(Channel):
    """In-process channel backed by a pair of unbounded asyncio queues."""

    _CLOSED = object()

    def __init__(self, inbox: asyncio.Queue, outbox: asyncio.Queue):
        self._inbox = inbox
        self._outbox = outbox
        self._closed = False

    @classmethod
    def pair(cls) -> Tuple["QueueChannel", "QueueChannel"]:
        """Create connected (worker side, controller side) channels."""
        to_worker, to_controller = asyncio.Queue(), asyncio.Queue()
        return cls(to_worker, to_controller), cls(to_controller, to_worker)

    def send(self, message: Any):
        if self._closed:
            raise ConnectionError("channel is closed")
        self._outbox.put_nowait(message)

    async def receive(self) -> Optional[Any]:
        message = await self._inbox.get()
        if message is self._CLOSED:
            return None
        return message

    def close(self):
        if not self._closed:
            self._closed = True
            self._outbox.put_nowait(self._CLOSED)


class PipeChannel(Channel):
    """Channel over a multiprocessing connection to a parent process."""

    def __init__(self, conn: Connection):
        self.conn = conn

    def send(self, message: Any):
        self.conn.send(message)

    async def receive(self) -> Optional[Any]:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self.conn.recv)
        except (EOFError, OSError):
            return None

    def close(self):
        self.conn.close()
