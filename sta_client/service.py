# Copyright 2025 STA Client Contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
STA Service

Connection to one SensorThings service endpoint.
"""

import copy
import logging
from typing import TYPE_CHECKING

import httpx

from .config import STAConfig, get_global_config

if TYPE_CHECKING:
    from .dao import ObservationDao

logger = logging.getLogger(__name__)


class SensorThingsService:
    """
    A SensorThings service endpoint and the HTTP client used to reach it.

    The service owns its ``httpx.Client``; close it with ``close()`` or use the
    service as a context manager.
    """

    def __init__(
        self,
        endpoint: str | None = None,
        timeout: float | None = None,
        config: STAConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the service.

        Args:
            endpoint: Base URL of the service, e.g. ``http://host/FROST-Server/v1.1/``
            timeout: Request timeout in seconds
            config: Optional configuration object, defaults to the global configuration
            transport: Optional httpx transport, mainly for testing
        """
        if config is None:
            if endpoint:
                config = STAConfig(endpoint=endpoint)
            else:
                # The shared global configuration is never modified by overrides.
                config = get_global_config()
                if timeout:
                    config = copy.copy(config)
        self.config = config

        # Override config with explicit parameters
        if endpoint:
            self.config.endpoint = endpoint
        if timeout:
            self.config.timeout = timeout

        self.client = httpx.Client(
            timeout=self.config.timeout,
            verify=self.config.verify_ssl,
            headers=self.config.headers,
            follow_redirects=False,
            transport=transport,
        )

    @property
    def endpoint(self) -> str:
        return self.config.endpoint

    def build_request(
        self, method: str, url: str | httpx.URL, content: str | bytes | None = None, headers: dict | None = None
    ) -> httpx.Request:
        """Build a request carrying the default headers."""
        return self.client.build_request(method, url, content=content, headers=headers)

    def execute(self, request: httpx.Request) -> httpx.Response:
        """
        Send a request and return the unread response.

        The response body is streamed, so the caller owns the response and must
        close it.
        """
        if self.config.log_requests:
            logger.debug("Request: %s %s headers=%s", request.method, request.url, dict(request.headers))

        response = self.client.send(request, stream=True)

        if self.config.log_responses:
            logger.debug("Response: %s %s headers=%s", response.status_code, request.url, dict(response.headers))
        return response

    def observations(self) -> "ObservationDao":
        """Data access object for Observations on this service."""
        from .dao import ObservationDao

        return ObservationDao(self)

    def close(self):
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
