"""
Pydantic schemas for Tasks Service request/response validation
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List


class TaskRecord(BaseModel):
    """
    One entry of the task log.

    Records are immutable once appended; the store only ever grows.
    """
    title: str = Field(..., description="Task title")
    text: str = Field(default="", description="Task body, may be empty")

    model_config = ConfigDict(frozen=True)


class TaskCreate(BaseModel):
    """Payload for appending a task."""
    title: str = Field(..., min_length=1, max_length=255, description="Task title")
    text: str = Field(default="", max_length=10000, description="Task body")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Reject titles that are only whitespace"""
        if not v.strip():
            raise ValueError("title must not be blank")
        return v

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"title": "Buy milk", "text": "2%"}
            ]
        }
    }


class TaskListResponse(BaseModel):
    message: str = Field(default="Tasks loaded.")
    tasks: List[TaskRecord] = Field(default_factory=list)


class TaskCreatedResponse(BaseModel):
    message: str = Field(default="Task stored.")
    created_task: TaskRecord = Field(..., alias="createdTask")

    model_config = ConfigDict(populate_by_name=True)
