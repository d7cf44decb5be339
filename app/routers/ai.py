"""
Router copywriting IA (parcours "idée de produit").

Endpoints:
- POST /ai/improve-answer - Réécrire la réponse du créateur
- POST /ai/generate-optimal-answer - Proposer une réponse à partir des réponses précédentes
- GET /ai/traces - Historique des appels
"""

import logging
from typing import Callable, Dict, List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.core.auth import get_current_user
from app.core.config import settings
from app.core.database import get_db
from app.core.errors import CollaboratorError
from app.models.ai_trace import AITrace
from app.models.user import User
from app.schemas.ai import AITraceResponse, ImproveAnswerRequest, OptimalAnswerRequest, SuggestionResponse
from app.services import ai_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])


def _run_and_trace(db: Session, user: User, analysis_type: str, question_id: str,
                   source_context: Dict[str, str], call: Callable) -> SuggestionResponse:
    """Appelle le modèle et enregistre une trace, succès comme échec"""
    try:
        suggestion, tokens_used, execution_time_ms = call()
    except CollaboratorError as e:
        error_trace = AITrace(
            user_id=user.id,
            analysis_type=analysis_type,
            question_id=question_id,
            source_context=source_context,
            generated_content="",
            model_used=settings.ANTHROPIC_MODEL,
            tokens_used=0,
            execution_time_ms=0,
            success=False,
            error_message=str(e)
        )
        db.add(error_trace)
        db.commit()

        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"AI error: {str(e)}"
        )

    trace = AITrace(
        user_id=user.id,
        analysis_type=analysis_type,
        question_id=question_id,
        source_context=source_context,
        generated_content=suggestion,
        model_used=settings.ANTHROPIC_MODEL,
        tokens_used=tokens_used,
        execution_time_ms=execution_time_ms,
        success=True,
        error_message=None
    )
    db.add(trace)
    db.commit()
    db.refresh(trace)

    return SuggestionResponse(
        suggestion=suggestion,
        tokens_used=tokens_used,
        execution_time_ms=execution_time_ms,
        trace_id=trace.id
    )


@router.post("/improve-answer", response_model=SuggestionResponse, status_code=status.HTTP_201_CREATED)
def improve_answer(
    request: ImproveAnswerRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    exemple:
    POST /ai/improve-answer
    {"question_id": "audience", "question": "Who is it for?", "answer": "people who want to cook"}
    →
    {"suggestion": "Busy parents who ...", "tokens_used": 312, "execution_time_ms": 900, "trace_id": 3}
    """
    return _run_and_trace(
        db, current_user, "improve_answer", request.question_id,
        {"answer": request.answer, **request.context},
        lambda: ai_service.improve_answer(request.question, request.answer, request.context),
    )


@router.post("/generate-optimal-answer", response_model=SuggestionResponse, status_code=status.HTTP_201_CREATED)
def generate_optimal_answer(
    request: OptimalAnswerRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return _run_and_trace(
        db, current_user, "generate_optimal_answer", request.question_id,
        request.previous_answers,
        lambda: ai_service.generate_optimal_answer(request.question, request.previous_answers),
    )


@router.get("/traces", response_model=List[AITraceResponse])
def list_traces(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    # les plus récentes d'abord
    return db.query(AITrace).filter(
        AITrace.user_id == current_user.id
    ).order_by(AITrace.created_at.desc(), AITrace.id.desc()).all()
