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
STA Client Serialization

The JSON policy shared by everything that talks to the server.
"""

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel

from .exceptions import SerializationError


class JsonCodec:
    """Encodes request payloads and decodes response bodies."""

    def __init__(self, ensure_ascii: bool = False):
        self.ensure_ascii = ensure_ascii

    def _default(self, obj: Any) -> Any:
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json", by_alias=True, exclude_none=True)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, (set, frozenset, tuple)):
            return list(obj)
        if hasattr(obj, "to_dict"):
            return obj.to_dict()
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")

    def dumps(self, value: Any) -> str:
        """Serialize ``value`` to a JSON string."""
        try:
            return json.dumps(value, default=self._default, ensure_ascii=self.ensure_ascii, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Could not serialize payload: {e}", cause=e) from e

    def loads(self, text: str) -> Any:
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Could not parse response body: {e}", cause=e) from e

    def loads_string_list(self, text: str) -> list[str]:
        """Decode a JSON array of strings."""
        data = self.loads(text)
        if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
            raise SerializationError(f"Expected a JSON array of strings, got: {text[:200]}")
        return data


_default_codec: JsonCodec | None = None


def get_default_codec() -> JsonCodec:
    """Get the codec used when none is passed explicitly."""
    global _default_codec
    if _default_codec is None:
        _default_codec = JsonCodec()
    return _default_codec
