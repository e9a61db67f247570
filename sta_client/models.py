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
STA Client Data Models

Pydantic models for SensorThings entities, and the DataArray batch document
used by the CreateObservations endpoint.
"""

from collections.abc import Iterable, Iterator
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

COMPONENT_ID = "id"
COMPONENT_PHENOMENON_TIME = "phenomenonTime"
COMPONENT_RESULT = "result"
COMPONENT_RESULT_TIME = "resultTime"
COMPONENT_RESULT_QUALITY = "resultQuality"
COMPONENT_VALID_TIME = "validTime"
COMPONENT_PARAMETERS = "parameters"
COMPONENT_FEATURE_OF_INTEREST = "FeatureOfInterest/id"

ALLOWED_COMPONENTS = (
    COMPONENT_ID,
    COMPONENT_PHENOMENON_TIME,
    COMPONENT_RESULT,
    COMPONENT_RESULT_TIME,
    COMPONENT_RESULT_QUALITY,
    COMPONENT_VALID_TIME,
    COMPONENT_PARAMETERS,
    COMPONENT_FEATURE_OF_INTEREST,
)
DEFAULT_COMPONENTS = (COMPONENT_PHENOMENON_TIME, COMPONENT_RESULT)


class EntityRef(BaseModel):
    """Reference to an existing entity by its id."""

    model_config = ConfigDict(populate_by_name=True)

    id: Union[int, str] = Field(..., alias="@iot.id", description="Identifier of the referenced entity")


class Observation(BaseModel):
    """A single measurement of a Datastream or MultiDatastream."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int] = Field(None, alias="@iot.id", description="Server assigned identifier")
    phenomenon_time: Optional[Union[datetime, str]] = Field(
        None, alias="phenomenonTime", description="Instant or interval of the observed phenomenon"
    )
    result: Any = Field(None, description="Observed value")
    result_time: Optional[datetime] = Field(None, alias="resultTime", description="Time the result was produced")
    result_quality: Any = Field(None, alias="resultQuality", description="Quality of the result")
    valid_time: Optional[str] = Field(None, alias="validTime", description="Validity interval of the result")
    parameters: Optional[dict[str, Any]] = Field(None, description="Free-form key/value parameters")
    datastream: Optional[EntityRef] = Field(None, alias="Datastream")
    multi_datastream: Optional[EntityRef] = Field(None, alias="MultiDatastream")
    feature_of_interest: Optional[EntityRef] = Field(None, alias="FeatureOfInterest")

    _service: Any = PrivateAttr(default=None)

    @field_validator("datastream", "multi_datastream", "feature_of_interest", mode="before")
    @classmethod
    def coerce_reference(cls, v):
        if isinstance(v, (int, str)):
            return {"@iot.id": v}
        return v

    @property
    def service(self):
        """The service this observation was created on, if any."""
        return self._service

    def set_service(self, service) -> None:
        self._service = service

    def component_value(self, component: str) -> Any:
        """Value of this observation for one DataArray component."""
        if component == COMPONENT_ID:
            return self.id
        if component == COMPONENT_PHENOMENON_TIME:
            return self.phenomenon_time
        if component == COMPONENT_RESULT:
            return self.result
        if component == COMPONENT_RESULT_TIME:
            return self.result_time
        if component == COMPONENT_RESULT_QUALITY:
            return self.result_quality
        if component == COMPONENT_VALID_TIME:
            return self.valid_time
        if component == COMPONENT_PARAMETERS:
            return self.parameters
        if component == COMPONENT_FEATURE_OF_INTEREST:
            return self.feature_of_interest.id if self.feature_of_interest else None
        raise ValueError(f"Unknown DataArray component: {component}")


def validate_components(components: Optional[Iterable[str]]) -> list[str]:
    if components is None:
        return list(DEFAULT_COMPONENTS)
    result = list(components)
    if not result:
        raise ValueError("At least one DataArray component is required")
    unknown = [c for c in result if c not in ALLOWED_COMPONENTS]
    if unknown:
        raise ValueError(f"Unknown DataArray components {unknown}, allowed: {list(ALLOWED_COMPONENTS)}")
    if len(set(result)) != len(result):
        raise ValueError(f"Duplicate DataArray components: {result}")
    return result


def _stream_key(observation: Observation) -> tuple[str, str]:
    # Ids compare as text so 1 and "1" name the same stream.
    if observation.datastream and observation.multi_datastream:
        raise ValueError("Observation must reference either a Datastream or a MultiDatastream, not both")
    if observation.datastream:
        return "Datastream", str(observation.datastream.id)
    if observation.multi_datastream:
        return "MultiDatastream", str(observation.multi_datastream.id)
    raise ValueError("Observation must reference a Datastream or a MultiDatastream")


class DataArrayValue:
    """The observations of one Datastream (or MultiDatastream) in DataArray form."""

    def __init__(self, stream_type: str, stream_id: Union[int, str], components: Optional[Iterable[str]] = None):
        if stream_type not in ("Datastream", "MultiDatastream"):
            raise ValueError(f"Unknown stream type: {stream_type}")
        self.stream_type = stream_type
        self.stream_id = stream_id
        self.components = validate_components(components)
        self.observations: list[Observation] = []

    @property
    def key(self) -> tuple[str, str]:
        return self.stream_type, str(self.stream_id)

    def add_observation(self, observation: Observation) -> None:
        if _stream_key(observation) != self.key:
            raise ValueError(f"Observation does not belong to {self.stream_type}({self.stream_id})")
        self.observations.append(observation)

    @property
    def rows(self) -> list[list[Any]]:
        return [[o.component_value(c) for c in self.components] for o in self.observations]

    def to_dict(self) -> dict[str, Any]:
        rows = self.rows
        return {
            self.stream_type: {"@iot.id": self.stream_id},
            "components": list(self.components),
            "dataArray@iot.count": len(rows),
            "dataArray": rows,
        }

    def __len__(self) -> int:
        return len(self.observations)


class ObservationBatch:
    """
    An ordered group of observations submitted in one CreateObservations request.

    Observations are grouped into one DataArrayValue per stream, in the order the
    streams are first seen. ``observations`` lists them in exactly the order they
    are serialized, which is the order of the server's response entries.
    """

    def __init__(self, observations: Optional[Iterable[Observation]] = None, components: Optional[Iterable[str]] = None):
        self.components = validate_components(components)
        self._values: dict[tuple[str, str], DataArrayValue] = {}
        if observations is not None:
            self.add_observations(observations)

    def add_observation(self, observation: Observation) -> "ObservationBatch":
        key = _stream_key(observation)
        value = self._values.get(key)
        if value is None:
            ref = observation.datastream or observation.multi_datastream
            value = DataArrayValue(key[0], ref.id, self.components)
            self._values[key] = value
        value.add_observation(observation)
        return self

    def add_observations(self, observations: Iterable[Observation]) -> "ObservationBatch":
        for observation in observations:
            self.add_observation(observation)
        return self

    def add_data_array_value(self, value: DataArrayValue) -> "ObservationBatch":
        key = value.key
        if key in self._values:
            raise ValueError(f"Batch already holds a DataArray for {key[0]}({key[1]})")
        self._values[key] = value
        return self

    @property
    def values(self) -> list[DataArrayValue]:
        return list(self._values.values())

    @property
    def observations(self) -> list[Observation]:
        return [o for value in self._values.values() for o in value.observations]

    @property
    def value(self) -> list[dict[str, Any]]:
        """The request payload: one DataArray object per stream."""
        return [v.to_dict() for v in self._values.values()]

    def __len__(self) -> int:
        return sum(len(v) for v in self._values.values())

    def __iter__(self) -> Iterator[Observation]:
        return iter(self.observations)
