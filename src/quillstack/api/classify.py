"""Classification, section detection and correction endpoints."""

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from quillstack.api.dependencies import (
    get_classification_log,
    get_orchestrator,
    get_section_splitter,
)
from quillstack.classification.orchestrator import ClassificationOrchestrator
from quillstack.classification.sections import SectionSplitter
from quillstack.models import (
    ClassificationResponse,
    ClassifyRequest,
    CorrectionRequest,
    CorrectionResponse,
    SectionDetectionResult,
)
from quillstack.stores.classification_log import ClassificationLog

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/classify", tags=["classify"])


@router.post("", response_model=ClassificationResponse)
async def classify(
    request: ClassifyRequest,
    orchestrator: Annotated[ClassificationOrchestrator, Depends(get_orchestrator)],
    classification_log: Annotated[ClassificationLog, Depends(get_classification_log)],
) -> ClassificationResponse:
    """Classify one note and report whether the user should confirm the type."""
    # Pattern matching is cheap but the remote stage blocks on network I/O
    result = await asyncio.to_thread(orchestrator.classify, request.text)
    needs_review = orchestrator.needs_review(result)
    classification_id = await asyncio.to_thread(
        classification_log.log_classification, request.text, result
    )
    return ClassificationResponse(
        result=result, needs_review=needs_review, classification_id=classification_id
    )


@router.post("/sections", response_model=SectionDetectionResult)
async def detect_sections(
    request: ClassifyRequest,
    splitter: Annotated[SectionSplitter, Depends(get_section_splitter)],
) -> SectionDetectionResult:
    """Split one OCR text blob into ordered, typed sections."""
    return await asyncio.to_thread(splitter.detect, request.text)


@router.post("/corrections", response_model=CorrectionResponse)
async def record_correction(
    request: CorrectionRequest,
    classification_log: Annotated[ClassificationLog, Depends(get_classification_log)],
) -> CorrectionResponse:
    """Record that the user changed a note's type."""
    result = await asyncio.to_thread(
        classification_log.log_correction, request.classification_id, request.corrected_type
    )
    if result is None:
        raise HTTPException(
            status_code=404,
            detail=f"Classification {request.classification_id} not found",
        )
    return CorrectionResponse(classification_id=request.classification_id, result=result)
