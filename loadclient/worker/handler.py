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
Command handler for a load client worker.

Incoming commands:
    {'type': 'test', ...RunCommand fields}   start a run
    {'type': 'stop'}                          stop serving after the active run

Outgoing events:
    {'type': 'progress', 'data': {'submittedDelta': int, 'committed': snapshot}}
    {'type': 'result', 'data': snapshot}
    {'type': 'error', 'data': str}
"""

import asyncio
import os
from collections.abc import Mapping
from typing import Any, Callable, Optional

from pydantic import ValidationError

from ..core.config import ClientConfig, ConfigLoader, RunCommand
from ..core.errors import ProtocolError, RunInProgressError
from ..drivers.loader import load_target, load_workload
from ..rate_control import create_rate_controller
from ..utils.logging import LoggerMixin
from .channel import Channel
from .test_driver import TestDriver


class ClientHandler(LoggerMixin):
    """
    Serves commands from one channel. At most one test runs at a time; a
    test command arriving while a run is active is rejected with an error.
    """

    def __init__(self, channel: Channel, config: Optional[ClientConfig] = None,
                 target_loader: Callable = load_target, workload_loader: Callable = load_workload):
        super().__init__()
        self.channel = channel
        self.config = config if config is not None else ClientConfig()
        self.target_loader = target_loader
        self.workload_loader = workload_loader
        self._active: Optional[asyncio.Task] = None

    @property
    def busy(self) -> bool:
        return self._active is not None and not self._active.done()

    async def serve(self):
        """Handle messages until the channel closes or a stop command arrives."""
        self.logger.info(f"Client {os.getpid()} ready")
        while True:
            message = await self.channel.receive()
            if message is None:
                break
            if isinstance(message, Mapping) and message.get('type') == 'stop':
                self.logger.info(f"Client {os.getpid()} stopping")
                break
            await self.handle(message)
        await self.wait_idle()

    async def wait_idle(self):
        """Wait for the active run, if any, to send its final event."""
        if self._active is not None:
            await self._active

    async def handle(self, message: Any):
        """Dispatch one incoming message; never raises."""
        try:
            if not isinstance(message, Mapping) or 'type' not in message:
                raise ProtocolError("unknown message type")
            if message['type'] != 'test':
                raise ProtocolError("unknown message type")
            if self.busy:
                raise RunInProgressError("a test is already running on this client")
            command = self._parse(message)
            self._active = asyncio.get_running_loop().create_task(self._do_test(command))
        except Exception as e:
            self.logger.error(f"Client {os.getpid()}: rejected message: {e}")
            self._send_error(str(e))

    @staticmethod
    def _parse(message: Mapping) -> RunCommand:
        payload = {key: value for key, value in message.items() if key != 'type'}
        try:
            return RunCommand(**payload)
        except ValidationError as e:
            raise ProtocolError(f"malformed test command: {e}") from e

    async def _do_test(self, command: RunCommand):
        try:
            result = await self.run_test(command)
        except Exception as e:
            self.logger.error(f"Client {os.getpid()}: error {e}", exc_info=True)
            self._send_error(str(e))
            return

        if self.config.result_delay > 0:
            # Let progress events queued by the final tick go out first
            await asyncio.sleep(self.config.result_delay)
        self._send({'type': 'result', 'data': result})

    async def run_test(self, command: RunCommand) -> Any:
        """Build the collaborators for a command and run it to completion."""
        self.logger.debug(f"run_test() with: {command.model_dump(by_alias=True)}")
        target = self.target_loader(ConfigLoader.resolve_target(command.target_config))
        workload = self.workload_loader(command.workload_module)
        rate_controller = create_rate_controller(command.rate_control)

        driver = TestDriver(target, workload, rate_controller, self._send,
                            update_interval=self.config.update_interval)
        kwargs = dict(
            trim=command.trim_config(),
            workload_args=command.workload_args,
            label=command.label,
            client_args=command.client_args,
            run_config=command.run_config(),
        )
        if command.is_duration:
            return await driver.run_duration(command.duration_seconds, **kwargs)
        return await driver.run_fixed(command.count, **kwargs)

    def _send_error(self, message: str):
        self._send({'type': 'error', 'data': message})

    def _send(self, event: dict):
        try:
            self.channel.send(event)
        except (ConnectionError, OSError) as e:
            self.logger.error(f"Cannot send {event['type']} event to controller: {e}")
