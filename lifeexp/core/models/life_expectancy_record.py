"""
LifeExpectancyRecord model representing one country-year observation.
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

STATUS_DEVELOPING = "Developing"
STATUS_DEVELOPED = "Developed"
STATUS_UNKNOWN = ""

KNOWN_STATUSES = (STATUS_DEVELOPING, STATUS_DEVELOPED)


class LifeExpectancyRecord(BaseModel):
    """
    One observation for a country in a year.

    Note: (country, year) is the business key, row_id the surrogate key.
    A life_expectancy, gdp or bmi of 0 or None means "not recorded".

    Attributes:
        row_id: Surrogate identifier assigned at ingestion (None until assigned)
        country: Country name
        year: Observation year
        status: "Developing", "Developed" or "" when unknown
        life_expectancy: Life expectancy in years
        adult_mortality: Adult mortality rate (zero is a valid value)
        gdp: GDP per capita
        bmi: Average BMI
    """

    row_id: int | None = Field(None, ge=0)
    country: str = Field(..., min_length=1)
    year: int
    status: Literal["Developing", "Developed", ""] = STATUS_UNKNOWN
    life_expectancy: float | None = Field(None, ge=0.0)
    adult_mortality: float | None = Field(None, ge=0.0)
    gdp: float | None = Field(None, ge=0.0)
    bmi: float | None = Field(None, ge=0.0)

    @field_validator("country")
    @classmethod
    def check_country_not_blank(cls, v):
        if not v.strip():
            raise ValueError("country must not be blank")
        return v

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        """Treat None and whitespace as the unknown status."""
        if v is None:
            return STATUS_UNKNOWN
        if isinstance(v, str):
            return v.strip()
        return v

    @property
    def has_life_expectancy(self) -> bool:
        return bool(self.life_expectancy)

    @property
    def has_status(self) -> bool:
        return self.status != STATUS_UNKNOWN

    class Config:
        json_schema_extra = {
            "example": {
                "row_id": 1,
                "country": "Afghanistan",
                "year": 2022,
                "status": "Developing",
                "life_expectancy": 65.0,
                "adult_mortality": 263.0,
                "gdp": 584.0,
                "bmi": 19.1,
            }
        }
