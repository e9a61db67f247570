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
Observation Data Access

Bulk creation of Observations through the CreateObservations endpoint.
"""

import logging
import re

import httpx

from .exceptions import (
    EndpointConstructionError,
    RedirectError,
    SerializationError,
    ServerRejectionError,
    TransportError,
)
from .models import ObservationBatch
from .serialization import JsonCodec, get_default_codec
from .service import SensorThingsService

CREATE_OBSERVATIONS_PATH = "CreateObservations"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"
ERROR_PREFIX = "error"

# 30 is not a valid HTTP status; it mirrors the historical redirect check.
REDIRECT_STATUS_CODES = frozenset({30, 302, 307})

_ID_PATTERN = re.compile(r"[+-]?[0-9]+")


def extract_id(location: str) -> int:
    """
    Extract the integer id from a location string such as ``.../Observations(123)``.

    Uses the text between the first ``(`` and the next ``)`` after it.
    Raises ValueError when there is no such text or it is not an integer.
    """
    start = location.find("(")
    if start < 0:
        raise ValueError(f"No '(' in location: {location}")
    end = location.find(")", start + 1)
    if end < 0:
        raise ValueError(f"No ')' after '(' in location: {location}")
    text = location[start + 1 : end]
    if not _ID_PATTERN.fullmatch(text):
        raise ValueError(f"Not an integer id: {text!r}")
    return int(text)


class ObservationDao:
    """A data access object for the Observation entity."""

    def __init__(
        self,
        service: SensorThingsService,
        codec: JsonCodec | None = None,
        logger: logging.Logger | None = None,
    ):
        self.service = service
        self.codec = codec or get_default_codec()
        self.logger = logger if logger is not None else logging.getLogger(__name__)

    def _create_url(self) -> httpx.URL:
        endpoint = self.service.endpoint or ""
        target = endpoint.rstrip("/") + "/" + CREATE_OBSERVATIONS_PATH
        try:
            url = httpx.URL(target)
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            self.logger.error("Could not create uri from endpoint %r: %s", endpoint, e)
            raise EndpointConstructionError("Could not create uri", endpoint=endpoint, cause=e) from e
        if url.scheme not in ("http", "https") or not url.host:
            self.logger.error("Could not create uri from endpoint %r: not an absolute http(s) URL", endpoint)
            raise EndpointConstructionError("Could not create uri", endpoint=endpoint)
        return url

    def _raise_for_status(self, response: httpx.Response) -> None:
        code = response.status_code
        if code in REDIRECT_STATUS_CODES:
            locations = response.headers.get_list("location")
            self.logger.error("Server responded with a redirect (%s) to: %s", code, locations)
            raise RedirectError(
                f"Server responded with a redirect to: {locations}", status_code=code, locations=locations
            )

        body = response.read().decode("utf-8", errors="replace")
        reason = response.reason_phrase
        self.logger.error("Server rejected CreateObservations with status %s: %s", code, reason)
        raise ServerRejectionError(f"{reason} {body}", status_code=code, reason=reason, body=body)

    def create(self, batch: ObservationBatch) -> list[str]:
        """
        Create all Observations of ``batch`` in one request.

        Observations the server created get their id and service set; entries
        the server reports as errors are logged and left untouched.

        Args:
            batch: The Observations to create.

        Returns:
            The location or error string the server returned for each Observation.

        Raises:
            SubmissionError: if the request could not be made or the server rejected it.
        """
        url = self._create_url()
        response = None
        try:
            json_payload = self.codec.dumps(batch.value)
            request = self.service.build_request(
                "POST", url, content=json_payload.encode("utf-8"), headers={"Content-Type": JSON_CONTENT_TYPE}
            )
            self.logger.debug("Posting to: %s", url)

            response = self.service.execute(request)
            if response.status_code != 201:
                self._raise_for_status(response)

            try:
                json_response = response.read().decode("utf-8")
            except UnicodeDecodeError as e:
                raise SerializationError(f"Response is not valid UTF-8: {e}", cause=e) from e
            result = self.codec.loads_string_list(json_response)
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {url} failed: {e}", cause=e) from e
        finally:
            if response is not None:
                response.close()

        observations = batch.observations
        if len(observations) != len(result):
            self.logger.warning(
                "Size of returned location list (%d) is not equal to number of sent Observations (%d)!",
                len(result),
                len(observations),
            )

        for observation, new_location in zip(observations, result):
            if new_location.startswith(ERROR_PREFIX):
                self.logger.warning("Failed to insert Observation. Error: %s.", new_location)
                continue
            try:
                observation.id = extract_id(new_location)
            except ValueError as e:
                self.logger.warning("Failed to read Observation id from %r: %s", new_location, e)
                continue
            observation.set_service(self.service)

        return result

    submit = create
