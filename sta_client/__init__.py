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
STA Python Client

A Python client for bulk creation of Observations on OGC SensorThings API
servers through the DataArray CreateObservations endpoint.
"""

from .config import STAConfig
from .dao import ObservationDao, extract_id
from .exceptions import (
    ConfigurationError,
    EndpointConstructionError,
    RedirectError,
    SerializationError,
    ServerRejectionError,
    STAError,
    SubmissionError,
    TransportError,
)
from .models import DataArrayValue, EntityRef, Observation, ObservationBatch
from .serialization import JsonCodec
from .service import SensorThingsService

__version__ = "1.0.0"
__author__ = "STA Client Contributors"

__all__ = [
    # Service
    "SensorThingsService",
    "ObservationDao",
    # Models
    "Observation",
    "ObservationBatch",
    "DataArrayValue",
    "EntityRef",
    # Exceptions
    "STAError",
    "ConfigurationError",
    "SubmissionError",
    "EndpointConstructionError",
    "SerializationError",
    "TransportError",
    "RedirectError",
    "ServerRejectionError",
    # Utilities
    "STAConfig",
    "JsonCodec",
    "extract_id",
]
