"""
API Schemas

Request/response models. JSON field names are camelCase on the
wire; Python attributes stay snake_case.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatRequest(CamelModel):
    """Client message for one chat turn."""

    message: str = Field(..., min_length=1, max_length=8000, description="Client message")
    session_id: Optional[str] = Field(default=None, description="Existing session to continue")
    scenario_id: Optional[str] = Field(default=None, description="Scenario for a new session")


class NewSessionRequest(CamelModel):
    """Request to start an empty session."""

    scenario_id: Optional[str] = Field(default=None, description="Client-chosen scenario")


class SessionCreatedResponse(CamelModel):
    """Summary of a newly created session."""

    session_id: str
    scenario_id: Optional[str] = None
    scenario_name: Optional[str] = None
    script_id: Optional[str] = None
    script_name: Optional[str] = None
    phase: str
    current_stage: str
    stage_name: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "sessionId": "123e4567-e89b-12d3-a456-426614174000",
                "scenarioId": "anxiety",
                "scenarioName": "Тревожный звоночек",
                "scriptId": "fear-to-support",
                "scriptName": "От страха к опоре",
                "phase": "Контекст",
                "currentStage": "context_gathering",
                "stageName": "Контекст",
            }
        }
    )
