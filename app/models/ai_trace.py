from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Boolean
from app.core.database import Base, utcnow

class AITrace(Base):
    __tablename__ = "ai_traces"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    analysis_type = Column(String, nullable=False)  # "improve_answer", "generate_optimal_answer"
    question_id = Column(String, nullable=False, index=True)  # question du parcours "idée"
    source_context = Column(JSON, nullable=True)  # réponses envoyées au modèle
    generated_content = Column(String, nullable=False)  # suggestion nettoyée
    model_used = Column(String, nullable=False)
    tokens_used = Column(Integer, nullable=True)  #tracking coûts/perf
    execution_time_ms = Column(Integer, nullable=True)
    success = Column(Boolean, default=True)
    error_message = Column(String, nullable=True)  # si failure
    created_at = Column(DateTime(timezone=True), default=utcnow)
