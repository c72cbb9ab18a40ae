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
Client worker running in its own process, one per controller pipe.
"""

import asyncio
import multiprocessing as mp
from multiprocessing.connection import Connection
from typing import Any, Dict, Optional, Tuple

from ..core.config import ClientConfig, load_env_config
from ..utils.logging import setup_logging
from .channel import PipeChannel
from .handler import ClientHandler


def client_main(conn: Connection, config: Optional[Dict[str, Any]] = None):
    """
    Child process entry point.

    :param conn: Worker end of the controller pipe
    :param config: ClientConfig fields; LOAD_CLIENT_* environment variables otherwise
    """
    client_config = ClientConfig(**config) if config else load_env_config()
    logger = setup_logging(level=client_config.log_level, log_file=client_config.log_file,
                           component="client", enable_rich=False)

    channel = PipeChannel(conn)
    handler = ClientHandler(channel, client_config)
    try:
        asyncio.run(handler.serve())
    finally:
        channel.close()
        logger.info("Client process exiting")


def spawn_client(config: Optional[ClientConfig] = None, name: str = "load-client") -> Tuple[mp.Process, Connection]:
    """
    Start a client worker process.

    :return: The process and the controller end of its pipe
    """
    parent_conn, child_conn = mp.Pipe()
    process = mp.Process(
        target=client_main,
        args=(child_conn, config.model_dump() if config is not None else None),
        name=name,
    )
    process.start()
    # The child owns its end now
    child_conn.close()
    return process, parent_conn
