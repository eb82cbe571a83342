from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from hrcore.models import ContractType, RecordType


class AnalysisFiltersModel(BaseModel):
    date_range: str = "custom"
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    ug: Optional[str] = None
    contract_type: Optional[str] = None
    daily_salary_override: float = 0.0
    sort_key: str = "cost"
    sort_direction: str = "desc"


class CollaboratorDraftModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    dni: str = Field(min_length=1)
    legajo: str = Field(min_length=1)
    cuil: str = Field(min_length=1)
    position: str = Field(min_length=1)
    ug: str = Field(min_length=1)
    hire_date: str = Field(alias="hireDate", min_length=1)
    contract_type: ContractType = Field(alias="contractType")
    category: str = ""
    cct: str = ""
    service: str = ""
    turn: str = ""
    observations: str = ""


class HireModel(BaseModel):
    salary: float
    cost: float = 0.0
    observations: str = ""
    date: Optional[str] = None


class NewCollaboratorModel(BaseModel):
    collaborator: CollaboratorDraftModel
    hire: HireModel


class RecordModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    date: str = Field(min_length=1)
    collaborator_id: str = Field(alias="collaboratorId", min_length=1)
    ug: str
    position: str
    type: RecordType
    details: Dict[str, Any] = Field(default_factory=dict)
    cost: float = 0.0
    observations: str = ""


class IdsModel(BaseModel):
    ids: List[str] = Field(default_factory=list)


class AssistantQuestionModel(BaseModel):
    question: str = Field(min_length=1)


class ImportResponse(BaseModel):
    imported: int
    errors: List[str]
