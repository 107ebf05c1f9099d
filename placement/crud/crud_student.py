from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel

from placement.schemas.ProfileSchemas import StudentProfile
from placement.schemas.documents import StudentProfileDoc


def _encode(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, list):
        return [_encode(v) for v in value]
    return value


class StudentStore:
    async def get(self, student_id: str) -> Optional[StudentProfile]:
        doc = await StudentProfileDoc.get(student_id)
        if doc is None:
            return None
        return StudentProfile.model_validate(doc.model_dump())

    async def update(self, student_id: str, fields: Dict[str, Any]) -> Optional[StudentProfile]:
        """Set the given top-level fields; each listed field is replaced wholesale."""
        doc = await StudentProfileDoc.get(student_id)
        if doc is None:
            return None
        changes = {k: _encode(v) for k, v in fields.items()}
        changes["updatedAt"] = datetime.now(timezone.utc)
        await doc.set(changes)
        return StudentProfile.model_validate(doc.model_dump())
