from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class FormatConfig(BaseModel):
    container: str = Field("json", min_length=1, description="Token for one-array-per-file framing")
    stream: str = Field("jstream", min_length=1, description="Token for concatenated-value framing")

    @model_validator(mode="after")
    def _distinct_tokens(self) -> FormatConfig:
        if self.container == self.stream:
            raise ValueError(f"format tokens must differ, both are {self.container!r}")
        return self


class FacilityConfig(BaseModel):
    name: str = "file-command-facility"
    uri: str | None = None
    formats: FormatConfig = Field(default_factory=FormatConfig)
    loop_fifo: bool = True
    max_reopens: int = Field(1, ge=0)


__all__ = [
    "FormatConfig",
    "FacilityConfig",
]
