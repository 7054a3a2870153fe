from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UnlockRequestPayload(BaseModel):
    """
    Schema for a guest unlock request. Missing values arrive as empty strings
    so the route can answer with its own 400 message.
    """

    model_config = ConfigDict(populate_by_name=True)

    code: str = Field("", description="Guest access code")
    step_id: str = Field("", alias="stepId", description="Step being unlocked")
    action: str = Field("", description="Agent action, defaults to stepId")

    @field_validator("code", "step_id", "action", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()
