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
STA Client Exceptions

Custom exception classes for the SensorThings client.
"""

from typing import Any


class STAError(Exception):
    """Base exception for SensorThings client errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self):
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(STAError):
    """Raised when there are configuration issues."""

    pass


class SubmissionError(STAError):
    """Raised when the server could not be asked to create a batch, or refused it."""

    pass


class EndpointConstructionError(SubmissionError):
    """Raised when the service endpoint cannot be turned into a valid URL."""

    def __init__(self, message: str, endpoint: str | None = None, cause: BaseException | None = None):
        super().__init__(message, cause=cause)
        self.endpoint = endpoint


class SerializationError(SubmissionError):
    """Raised when a payload cannot be encoded, or a response body cannot be decoded."""

    pass


class TransportError(SubmissionError):
    """Raised when network I/O fails during the request or response."""

    pass


class RedirectError(SubmissionError):
    """Raised when the server answers with a redirect instead of creating the entities."""

    def __init__(self, message: str, status_code: int, locations: list[str] | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.locations = locations or []


class ServerRejectionError(SubmissionError):
    """Raised for any other non-success status."""

    def __init__(self, message: str, status_code: int, reason: str = "", body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason
        self.body = body
