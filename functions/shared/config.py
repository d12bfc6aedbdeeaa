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

"""
Environment-backed settings for the thank-you gram functions.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.constants import (
    CACHE_MAX_AGE_SECONDS,
    CACHE_SHARED_MAX_AGE_SECONDS,
    MAX_BATCH_WRITE_OPERATIONS,
)
from shared.firebase_constants import MESSAGES_COLLECTION

DEFAULT_SEED_DATA_DIR = str(Path(__file__).resolve().parents[1] / "seed_data")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GRAMS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    messages_collection: str = Field(default=MESSAGES_COLLECTION)

    # Writes per Firestore batch; values above the Firestore ceiling are rejected.
    batch_write_limit: int = Field(
        default=MAX_BATCH_WRITE_OPERATIONS, gt=0, le=MAX_BATCH_WRITE_OPERATIONS
    )

    seed_data_dir: str = Field(default=DEFAULT_SEED_DATA_DIR)

    cache_max_age_seconds: int = Field(default=CACHE_MAX_AGE_SECONDS, ge=0)
    cache_shared_max_age_seconds: int = Field(
        default=CACHE_SHARED_MAX_AGE_SECONDS, ge=0
    )

    @property
    def cache_control_header(self) -> str:
        return (
            f"public, max-age={self.cache_max_age_seconds}, "
            f"s-maxage={self.cache_shared_max_age_seconds}"
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
