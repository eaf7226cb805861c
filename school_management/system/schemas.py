from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from ..common.schemas import CamelModel
from ..core.enums import ConfigType


class ConfigurationCreate(CamelModel):
    key: str = Field(min_length=1)
    value: str
    type: ConfigType
    category: str = Field(min_length=1)
    description: Optional[str] = None
    is_sensitive: bool = False


class ConfigurationUpdate(CamelModel):
    key: Optional[str] = Field(default=None, min_length=1)
    value: Optional[str] = None
    type: Optional[ConfigType] = None
    category: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    is_sensitive: Optional[bool] = None
    is_active: Optional[bool] = None


class BackupRequest(CamelModel):
    include_database: bool = False
    include_files: bool = False
    include_uploads: bool = False
    compression: bool = False


class AuditSummaryRequest(CamelModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
