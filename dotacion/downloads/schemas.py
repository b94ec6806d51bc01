"""Pydantic schemas for the downloads catalog."""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReportParamRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    label: str
    type: str
    options_endpoint: Optional[str] = Field(default=None, alias="optionsEndpoint")
    required: bool = False
    default: Optional[Any] = Field(default=None, alias="defaultValue")


class ReportRead(BaseModel):
    """A report as shown on the downloads page."""

    model_config = ConfigDict(populate_by_name=True)

    slug: str
    block: str = Field(alias="bloque")
    name: str = Field(alias="nombre")
    description: str = Field(alias="descripcion")
    params: List[ReportParamRead] = []
    allow_distinct: bool = Field(alias="allowDistinct")
    default_distinct: bool = Field(alias="defaultDistinct")
    distinct_columns: List[str] = Field(default=[], alias="distinctColumns")


class DownloadBlockRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    reports: List[ReportRead] = Field(default=[], alias="descargas")


class DownloadCatalog(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    blocks: List[DownloadBlockRead] = Field(default=[], alias="bloques")
