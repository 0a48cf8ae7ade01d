import uuid
from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.step import StepType, ProgressStatus


FieldType = Literal["text", "textarea", "select", "file"]


# 관리자가 단계마다 정의하는 입력 필드 하나
class FormField(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: FieldType = "text"
    required: bool = False
    options: Optional[List[str]] = None
    placeholder: Optional[str] = None

    @model_validator(mode="after")
    def _select_needs_options(self):
        if self.type == "select" and not self.options:
            raise ValueError(f"select field '{self.name}' needs options")
        return self


class FormFieldsSchema(BaseModel):
    fields: List[FormField] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_names(self):
        names = [f.name for f in self.fields]
        if len(names) != len(set(names)):
            raise ValueError("field names must be unique")
        return self


class StepCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    step_type: StepType
    order_index: int = Field(..., ge=0)
    is_active: bool = True
    form_fields: FormFieldsSchema = Field(default_factory=FormFieldsSchema)


class StepUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    step_type: Optional[StepType] = None
    order_index: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None
    form_fields: Optional[FormFieldsSchema] = None

    @field_validator("name", "step_type", "order_index", "is_active", "form_fields")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class StepResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str]
    step_type: StepType
    order_index: int
    is_active: bool
    form_fields: dict
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProgressResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    step_id: uuid.UUID
    status: ProgressStatus
    data: dict
    admin_notes: Optional[str]
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)


# 학생 단계 제출: 값은 필드 이름 → 스칼라 값
class SubmitRequest(BaseModel):
    data: dict[str, Any] = Field(default_factory=dict)


# 관리자 승인/반려
class DecisionRequest(BaseModel):
    notes: Optional[str] = Field(default=None, max_length=2000)


class ProgressSummaryResponse(BaseModel):
    completed_count: int
    total_count: int
    percentage: float
    current_step: Optional[StepResponse] = None

    @classmethod
    def from_summary(cls, summary) -> "ProgressSummaryResponse":
        return cls(
            completed_count=summary.completed_count,
            total_count=summary.total_count,
            percentage=round(summary.percentage, 2),
            current_step=StepResponse.model_validate(summary.current_step) if summary.current_step else None,
        )
