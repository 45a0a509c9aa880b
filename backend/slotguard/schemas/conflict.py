from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field


class ConflictReasonOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["room", "faculty", "section"]
    conflicting_entry_id: str = Field(alias="conflictingEntryId")
    message: str


class ConflictReportOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    conflicts: List[ConflictReasonOut]
    has_conflicts: bool = Field(alias="hasConflicts")
    # Preview results are never authoritative; only a commit decides.
    advisory: bool = True
