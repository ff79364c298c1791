from __future__ import annotations

from typing import List
from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator
from pydantic.alias_generators import to_camel


class TimezoneRecord(BaseModel):
    """One IANA zone as shipped in the data artifact.

    Attribute names are snake_case; the artifact and ``model_dump(by_alias=True)``
    use the camelCase keys (``countryCode``, ``utcOffsetStr``...).
    """

    iana: str = Field(min_length=1, description="IANA identifier, e.g. America/New_York")
    city: str = Field(description="Readable city name, underscores replaced with spaces")
    country_code: str = Field(description="ISO 3166 code, may be empty")
    country_name: str = Field(description="Country name, may be empty")
    utc_offset: StrictInt = Field(description="Signed UTC offset in minutes")
    utc_offset_str: str = Field(pattern=r"^[+-]\d{2}:\d{2}$", description="Offset as ±HH:MM")
    abbreviations: str = Field(description="Comma-joined uppercase abbreviations, may be empty")

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        json_schema_extra={
            "example": {
                "iana": "America/New_York",
                "city": "New York",
                "countryCode": "US",
                "countryName": "United States",
                "utcOffset": -300,
                "utcOffsetStr": "-05:00",
                "abbreviations": "EST,EDT,EWT,EPT",
            }
        },
    )

    @field_validator("abbreviations")
    @classmethod
    def _strip_abbreviations(cls, v: str) -> str:
        # drop blanks and stray spaces around tokens, keep order
        return ",".join(t.strip() for t in v.split(",") if t.strip())

    def abbreviation_tokens(self) -> List[str]:
        if not self.abbreviations:
            return []
        return self.abbreviations.split(",")


class SearchOptions(BaseModel):
    limit: StrictInt = Field(default=20, description="Maximum number of results; <= 0 yields nothing")
    ranked: bool = Field(default=True, description="Apply tiered re-ranking on top of fuzzy order")

    model_config = ConfigDict(frozen=True, extra="forbid")


__all__ = ["TimezoneRecord", "SearchOptions"]
