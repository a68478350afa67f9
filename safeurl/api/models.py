"""Pydantic models for API request/response."""

from pydantic import BaseModel, Field, field_validator

from safeurl.cidr import parse_cidr


class ValidateRequest(BaseModel):
    """URL to check, with optional per-call overrides."""

    url: str = Field(min_length=1, max_length=2048)
    schemes: list[str] | None = Field(default=None, max_length=20)
    block_reserved: bool | None = None
    blocklist: list[str] | None = Field(default=None, max_length=256)
    allowlist: list[str] | None = Field(default=None, max_length=256)
    detailed_error: bool | None = None

    @field_validator("blocklist", "allowlist")
    @classmethod
    def validate_ranges(cls, v: list[str] | None) -> list[str] | None:
        """Malformed ranges are a 422, not a 500."""
        if v is not None:
            for cidr in v:
                parse_cidr(cidr)
        return v

    def overrides(self) -> dict:
        return self.model_dump(exclude={"url"}, exclude_none=True)


class ValidateResponse(BaseModel):
    """Verdict for a URL."""

    url: str
    allowed: bool
    reason: str | None = None
