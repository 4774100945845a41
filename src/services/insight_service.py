"""
AI Insights Service.

Generates portfolio-level insights from aggregate customer figures and
tracks their lifecycle (active, resolved, dismissed).
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from models.insight import AIInsight, GeneratedInsight, InsightType
from models.risk import RecordStatus
from repositories.database import Database, get_database
from services.ai_service import AIService, parse_json
from utils.logging_config import get_logger
from utils.settings import AppSettings

logger = get_logger(__name__)

HIGH_VALUE_BALANCE = 50_000
HIGH_RISK_SCORE = 0.7
INSIGHT_MAX_TOKENS = 1500


def portfolio_summary(customers: List[dict], segment_count: int) -> dict:
    total = len(customers)
    balances = [c.get("account_balance") or 0 for c in customers]
    return {
        "total_customers": total,
        "avg_balance": sum(balances) / total if total else 0.0,
        "high_value": sum(1 for b in balances if b > HIGH_VALUE_BALANCE),
        "high_risk": sum(1 for c in customers if (c.get("risk_score") or 0) > HIGH_RISK_SCORE),
        "segments": segment_count,
    }


def insights_prompt(summary: dict) -> str:
    return (
        "Analyze this banking customer data and generate 5-8 actionable business insights:\n\n"
        "Customer Data Summary:\n"
        f"- Total customers: {summary['total_customers']}\n"
        f"- Average balance: ${summary['avg_balance']:,.2f}\n"
        f"- High-value customers (>$50k): {summary['high_value']}\n"
        f"- High-risk customers: {summary['high_risk']}\n"
        f"- Active segments: {summary['segments']}\n\n"
        "Generate insights for revenue opportunities, risk management alerts, "
        "customer retention strategies, cross-selling opportunities, operational "
        "improvements, market trends and customer behavior patterns.\n\n"
        "For each insight provide title, description (2-3 sentences with specific "
        "recommendations), type ("
        f"{', '.join(t.value for t in InsightType)}), priority (high, medium, low) and "
        "confidence (0.0-1.0).\n\n"
        "Return as JSON array with fields: title, description, type, priority, confidence"
    )


class InsightService:
    def __init__(
        self,
        database: Optional[Database] = None,
        ai_service: Optional[AIService] = None,
        settings: Optional[AppSettings] = None,
    ):
        self.db = database or get_database()
        self.settings = settings or AppSettings.from_environment()
        self._ai = ai_service

    @property
    def ai(self) -> AIService:
        if self._ai is None:
            self._ai = AIService(settings=self.settings)
        return self._ai

    def list_insights(self, limit: int = 50) -> List[AIInsight]:
        rows = self.db.ai_insights.list(order_by={"created_at": "desc"}, limit=limit)
        return [AIInsight.model_validate(row) for row in rows]

    def generate_insights(self, user_id: str) -> List[AIInsight]:
        """Ask the model for portfolio insights and store them as active.

        Returns [] when the call fails or the reply is not a JSON array.
        """
        customers = self.db.customers.list(limit=self.settings.customer_fetch_limit)
        summary = portfolio_summary(customers, self.db.customer_segments.count())

        try:
            text = self.ai.generate_text(insights_prompt(summary), max_tokens=INSIGHT_MAX_TOKENS)
            parsed = parse_json(text)
            if not isinstance(parsed, list):
                raise ValueError("Expected a JSON array of insights")
            generated = [GeneratedInsight.model_validate(item) for item in parsed]
        except Exception as exc:
            logger.error("Error generating insights", extra={"error": str(exc)})
            return []

        stored = []
        for insight in generated:
            row = self.db.ai_insights.create(
                {
                    "id": f"insight_{uuid.uuid4().hex[:16]}",
                    "user_id": user_id,
                    "title": insight.title,
                    "description": insight.description,
                    "insight_type": insight.insight_type,
                    "priority": insight.priority,
                    "confidence_score": insight.confidence,
                    "status": RecordStatus.ACTIVE.value,
                }
            )
            stored.append(AIInsight.model_validate(row))
        logger.info("Stored AI insights", extra={"count": len(stored)})
        return stored

    def update_status(self, insight_id: str, status: RecordStatus) -> AIInsight:
        row = self.db.ai_insights.update(insight_id, {"status": status.value})
        return AIInsight.model_validate(row)
