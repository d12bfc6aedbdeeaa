# Copyright 2025 Google LLC
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
# ==============================================================================

"""Helpers for moving payloads between Python and the JSON seen by clients."""

import re
from datetime import datetime, timezone
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def snake_to_camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def camel_to_snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def convert_keys(data: Any, mode: str) -> Any:
    """
    Recursively converts dictionary keys between snake_case and camelCase.

    Args:
        data: A dict, list or scalar value.
        mode (str): Either "snake_to_camel" or "camel_to_snake".

    Returns:
        A copy of `data` with every dictionary key converted.
    """
    if mode == "snake_to_camel":
        convert = snake_to_camel
    elif mode == "camel_to_snake":
        convert = camel_to_snake
    else:
        raise ValueError(f"Unknown key conversion mode: {mode}")

    if isinstance(data, dict):
        return {
            (convert(key) if isinstance(key, str) else key): convert_keys(value, mode)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [convert_keys(item, mode) for item in data]
    return data


def format_timestamp(value: datetime) -> str:
    """Formats a datetime the way browsers print dates: 2024-05-01T12:00:00.000Z."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def json_default(value: Any) -> Any:
    """`default` hook for json.dumps covering Firestore value types."""
    if isinstance(value, datetime):
        return format_timestamp(value)
    return str(value)
