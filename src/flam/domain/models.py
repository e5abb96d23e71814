from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional

class Credential(BaseModel):
    """the stored API key, persisted as {"apiKey": ...}."""
    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field(alias="apiKey", min_length=1)

class PackageDescriptor(BaseModel):
    """represents the publishable part of a local manifest (package.json)."""
    name: str = Field(min_length=1)
    version: str = Field(min_length=1)
    description: str = ""

    @field_validator("description", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

class SearchResult(BaseModel):
    package_name: str
    version: str
    description: Optional[str] = None
    author: Optional[str] = None

class PackageDetails(BaseModel):
    version: str
