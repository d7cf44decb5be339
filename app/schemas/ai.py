from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Dict, Optional

# Copywriting IA du parcours "idée de produit"

class ImproveAnswerRequest(BaseModel):
    question_id: str
    question: str
    answer: str
    context: Dict[str, str] = {}  # autres réponses déjà données

class OptimalAnswerRequest(BaseModel):
    question_id: str
    question: str
    previous_answers: Dict[str, str] = {}

class SuggestionResponse(BaseModel):
    suggestion: str
    tokens_used: int
    execution_time_ms: int
    trace_id: int

class AITraceResponse(BaseModel):
    """Trace IA retournée par l'API"""
    id: int
    user_id: int
    analysis_type: str
    question_id: str
    source_context: Optional[Dict[str, str]]
    generated_content: str
    model_used: str
    tokens_used: Optional[int]
    execution_time_ms: Optional[int]
    success: bool
    error_message: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
