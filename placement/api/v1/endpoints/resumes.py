from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Form
from typing import Optional
from pydantic import BaseModel, Field
import logging

from placement.core.errors import PipelineError
from placement.features.resume_pipeline import ResumePipeline, get_resume_pipeline
from placement.schemas.AnalysisSchemas import PipelineResponse

router = APIRouter()
logger = logging.getLogger(__name__)


class AnalyzeRequest(BaseModel):
    studentId: str = Field(..., description="Student whose resume should be analyzed")
    downloadUrl: Optional[str] = Field(None, description="Stored file URL; defaults to the profile's current resume")
    forceReanalyze: bool = Field(False, description="Ignore a cached analysis of the same file")
    targetRole: Optional[str] = None


class ImproveRequest(BaseModel):
    studentId: str
    analysisId: Optional[str] = Field(None, description="Analysis to improve from; defaults to the latest")
    targetRole: Optional[str] = None


class SetFinalRequest(BaseModel):
    studentId: str
    historyId: str


class DeleteHistoryRequest(BaseModel):
    studentId: str
    historyId: str


def to_http_error(err: PipelineError) -> HTTPException:
    headers = None
    if getattr(err, "retry_after", None):
        headers = {"Retry-After": str(err.retry_after)}
    return HTTPException(status_code=err.status_code, detail=err.to_detail(), headers=headers)


@router.post("/upload", response_model=PipelineResponse, status_code=201)
async def upload_resume(
    file: UploadFile = File(...),
    student_id: str = Form(...),
    target_role: Optional[str] = Form(None),
    pipeline: ResumePipeline = Depends(get_resume_pipeline),
):
    """
    Upload a resume (PDF, DOC or DOCX, max 5MB), store it and analyze it.

    The upload succeeds even when extraction or analysis does not; check
    `analysisStatus` in the returned data.
    """
    content = await file.read()
    try:
        result = await pipeline.upload_and_analyze(
            file_bytes=content,
            filename=file.filename or "resume",
            mime_type=file.content_type or "",
            student_id=student_id,
            target_role=target_role,
        )
    except PipelineError as e:
        raise to_http_error(e)
    return {"status": 201, "message": result.message, "data": result}


@router.post("/analyze", response_model=PipelineResponse)
async def analyze_resume(request: AnalyzeRequest, pipeline: ResumePipeline = Depends(get_resume_pipeline)):
    try:
        result = await pipeline.reanalyze(
            student_id=request.studentId,
            download_url=request.downloadUrl,
            force_reanalyze=request.forceReanalyze,
            target_role=request.targetRole,
        )
    except PipelineError as e:
        raise to_http_error(e)
    message = "Returning existing analysis" if result.cached else "Resume analyzed successfully"
    return {"status": 200, "message": message, "data": result}


@router.get("/analysis", response_model=PipelineResponse)
async def read_analysis(
    student_id: Optional[str] = None,
    analysis_id: Optional[str] = None,
    pipeline: ResumePipeline = Depends(get_resume_pipeline),
):
    try:
        analysis = await pipeline.get_stored_analysis(student_id=student_id, analysis_id=analysis_id)
    except PipelineError as e:
        raise to_http_error(e)
    return {"status": 200, "message": "Analysis returned successfully", "data": analysis}


@router.get("/analyses/{student_id}", response_model=PipelineResponse)
async def read_analyses(student_id: str, pipeline: ResumePipeline = Depends(get_resume_pipeline)):
    analyses = await pipeline.list_analyses(student_id)
    return {"status": 200, "message": "Analyses returned successfully", "data": analyses}


@router.post("/improve", response_model=PipelineResponse)
async def improve_resume(request: ImproveRequest, pipeline: ResumePipeline = Depends(get_resume_pipeline)):
    """
    Generate an improved resume from a stored analysis and render it to PDF.

    If the PDF cannot be produced or stored, the improved data is still
    returned with `pdfUrl` set to null and an `error` message.
    """
    try:
        result = await pipeline.improve_resume(
            student_id=request.studentId,
            analysis_id=request.analysisId,
            target_role=request.targetRole,
        )
    except PipelineError as e:
        raise to_http_error(e)
    message = "Resume improved successfully" if result.pdfUrl else "Resume improved, but the PDF is unavailable"
    return {"status": 200, "message": message, "data": result}


@router.get("/history/{student_id}", response_model=PipelineResponse)
async def read_history(student_id: str, pipeline: ResumePipeline = Depends(get_resume_pipeline)):
    history = await pipeline.list_history(student_id)
    return {"status": 200, "message": "Resume history returned successfully", "data": history}


@router.post("/set-final", response_model=PipelineResponse)
async def set_final_resume(request: SetFinalRequest, pipeline: ResumePipeline = Depends(get_resume_pipeline)):
    try:
        result = await pipeline.set_final_resume(request.studentId, request.historyId)
    except PipelineError as e:
        raise to_http_error(e)
    return {"status": 200, "message": "Final resume updated", "data": result}


@router.delete("/history", response_model=PipelineResponse)
async def delete_history_entry(request: DeleteHistoryRequest, pipeline: ResumePipeline = Depends(get_resume_pipeline)):
    try:
        entry = await pipeline.delete_history_entry(request.studentId, request.historyId)
    except PipelineError as e:
        raise to_http_error(e)
    return {"status": 200, "message": "Resume history entry deleted", "data": entry}


@router.get("/quota", response_model=PipelineResponse)
async def read_quota(pipeline: ResumePipeline = Depends(get_resume_pipeline)):
    return {"status": 200, "message": "Quota returned successfully", "data": pipeline.get_quota_info()}
