from pydantic import BaseModel

from models.records import OutcomeEvent, ReliabilityRecord
from services.reliability import describe_outcome


class HealthResponse(BaseModel):
    status: str = "ok"
    fit_weights: dict[str, float] = {}
    composite_weights: dict[str, float] = {}
    seniority_levels: list[str] = []
    reliability_store_version: int = 0


class ReliabilityResponse(BaseModel):
    record: ReliabilityRecord
    raw_accuracy: float | None = None
    last_outcome: str = ""

    @classmethod
    def from_record(cls, record: ReliabilityRecord, last_event: OutcomeEvent | None = None) -> "ReliabilityResponse":
        return cls(
            record=record,
            raw_accuracy=record.raw_accuracy,
            last_outcome=describe_outcome(last_event),
        )


class OutcomeResponse(BaseModel):
    recorded: int = 0
    records: list[ReliabilityRecord] = []
    reliability_store_version: int = 0
