from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from placement.api.v1.endpoints.resumes import to_http_error
from placement.core.errors import PipelineError
from placement.features.resume_pipeline import ResumePipeline, get_resume_pipeline
from placement.schemas.AnalysisSchemas import PipelineResponse
from placement.schemas.ProfileSchemas import ItemSource, MergeCategory, MergeStrategy

router = APIRouter()


class ReconcileRequest(BaseModel):
    studentId: str
    category: MergeCategory
    strategy: MergeStrategy = Field("merge", description="profile keeps manual data, resume replaces it, merge unions both")


class RemoveItemRequest(BaseModel):
    category: MergeCategory
    key: str = Field(..., description="Skill name, 'institution|degree', 'company|role' or project title")
    source: ItemSource


@router.post("/reconcile", response_model=PipelineResponse)
async def reconcile_profile(request: ReconcileRequest, pipeline: ResumePipeline = Depends(get_resume_pipeline)):
    try:
        result = await pipeline.reconcile(request.studentId, request.category, request.strategy)
    except PipelineError as e:
        raise to_http_error(e)
    return {"status": 200, "message": f"{request.category} reconciled", "data": result}


@router.get("/{student_id}/merged", response_model=PipelineResponse)
async def read_merged_profile(student_id: str, pipeline: ResumePipeline = Depends(get_resume_pipeline)):
    try:
        view = await pipeline.merged_profile_view(student_id)
    except PipelineError as e:
        raise to_http_error(e)
    return {"status": 200, "message": "Merged profile returned successfully", "data": view}


@router.post("/{student_id}/remove-item", response_model=PipelineResponse)
async def remove_profile_item(
    student_id: str,
    request: RemoveItemRequest,
    pipeline: ResumePipeline = Depends(get_resume_pipeline),
):
    try:
        view = await pipeline.remove_profile_item(student_id, request.category, request.key, request.source)
    except PipelineError as e:
        raise to_http_error(e)
    return {"status": 200, "message": "Item removed", "data": view}
