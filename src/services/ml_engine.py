"""
AI-backed customer analytics.

Each operation is one Bedrock round trip with a prompt and an expected JSON
shape. On any failure the operation logs and falls back: rule-based
segmentation, the customer's current risk bucket, the stored CLV, or an
empty list.
"""

from __future__ import annotations

import json
import re
import uuid
from typing import Iterable, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from models.customer import CustomerData, Transaction
from models.insight import CustomerInsight, ProductRecommendation
from models.risk import RiskAnalysis, RiskLevel
from models.segment import SegmentationResult, SegmentCharacteristics
from services.ai_service import AIService
from services.scoring import risk_level_for
from services.segmentation import fallback_segmentation
from utils.logging_config import get_logger

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

SEGMENTATION_SAMPLE_SIZE = 50
RISK_TRANSACTION_SAMPLE = 10

SEGMENTATION_SCHEMA = {
    "type": "object",
    "properties": {
        "segments": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "segmentName": {"type": "string"},
                    "customerIds": {"type": "array", "items": {"type": "string"}},
                    "characteristics": {
                        "type": "object",
                        "properties": {
                            "avgBalance": {"type": "number"},
                            "avgIncome": {"type": "number"},
                            "avgRiskScore": {"type": "number"},
                            "avgCLV": {"type": "number"},
                            "size": {"type": "number"},
                        },
                    },
                    "insights": {"type": "array", "items": {"type": "string"}},
                },
            },
        }
    },
}

CUSTOMER_INSIGHTS_SCHEMA = {
    "type": "object",
    "properties": {
        "insights": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "type": {"type": "string"},
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                    "priority": {"type": "string"},
                    "confidence": {"type": "number"},
                    "recommendation": {"type": "string"},
                    "potentialRevenue": {"type": "number"},
                },
            },
        }
    },
}

RISK_SCHEMA = {
    "type": "object",
    "properties": {
        "riskScore": {"type": "number"},
        "riskLevel": {"type": "string", "enum": [level.value for level in RiskLevel]},
        "factors": {"type": "array", "items": {"type": "string"}},
        "recommendations": {"type": "array", "items": {"type": "string"}},
    },
}

RECOMMENDATIONS_SCHEMA = {
    "type": "object",
    "properties": {
        "recommendations": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "productType": {"type": "string"},
                    "productName": {"type": "string"},
                    "reasoning": {"type": "string"},
                    "recommendationScore": {"type": "number"},
                    "potentialRevenue": {"type": "number"},
                    "priority": {"type": "string"},
                },
            },
        }
    },
}

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_LEADING_NUMBER = re.compile(r"-?\d*\.?\d+")


def _money(value: Optional[float]) -> str:
    return f"{value:,.0f}" if value is not None else "N/A"


def _validate_items(items: Iterable, model: Type[M], label: str) -> List[M]:
    """Validate list items one by one, dropping malformed ones."""
    valid: List[M] = []
    for item in items or []:
        try:
            valid.append(model.model_validate(item))
        except ValidationError as exc:
            logger.warning(
                "Skipping malformed model item",
                extra={"kind": label, "error": str(exc)},
            )
    return valid


def _segment_from_reply(segment: dict) -> SegmentationResult:
    chars = segment.get("characteristics") or {}
    customer_ids = [str(cid) for cid in segment.get("customerIds") or []]
    return SegmentationResult(
        segment_id=f"seg_{uuid.uuid4().hex[:12]}",
        segment_name=segment["segmentName"],
        customers=customer_ids,
        characteristics=SegmentCharacteristics(
            avg_balance=chars.get("avgBalance") or 0,
            avg_income=chars.get("avgIncome") or 0,
            avg_risk_score=chars.get("avgRiskScore") or 0,
            avg_clv=chars.get("avgCLV") or 0,
            size=int(chars.get("size") or len(customer_ids)),
        ),
        insights=[str(i) for i in segment.get("insights") or []],
    )


def parse_leading_number(text: str) -> Optional[float]:
    """Leading number of ``text`` once currency symbols and separators are removed.

    "$12,500.00." gives 12500.0 and "10000-15000" gives 10000.0.
    """
    match = _LEADING_NUMBER.match(_NON_NUMERIC.sub("", text))
    return float(match.group()) if match else None


class MLEngine:
    """Prompt builders and response parsers around AIService."""

    def __init__(self, ai_service: Optional[AIService] = None):
        self.ai = ai_service or AIService()

    def perform_customer_segmentation(
        self, customers: Sequence[CustomerData]
    ) -> List[SegmentationResult]:
        """AI segmentation into 4-6 segments, rule-based on failure."""
        if not customers:
            return []

        try:
            summary = [
                {
                    "id": c.id,
                    "balance": c.account_balance,
                    "income": c.annual_income,
                    "creditScore": c.credit_score,
                    "transactionCount": c.transaction_count,
                    "riskScore": c.risk_score,
                    "clv": c.customer_lifetime_value,
                    "accountAge": c.account_age,
                    "lastActivity": c.last_transaction_days,
                }
                for c in customers[:SEGMENTATION_SAMPLE_SIZE]
            ]
            obj = self.ai.generate_object(
                self._segmentation_prompt(len(customers), summary), SEGMENTATION_SCHEMA
            )

            results: List[SegmentationResult] = []
            for segment in obj.get("segments") or []:
                try:
                    results.append(_segment_from_reply(segment))
                except (AttributeError, KeyError, TypeError, ValueError) as exc:
                    logger.warning(
                        "Skipping malformed model item",
                        extra={"kind": "segment", "error": str(exc)},
                    )
            logger.info("AI segmentation complete", extra={"segments": len(results)})
            return results
        except Exception as exc:
            logger.error(
                "AI segmentation failed; using rule-based segmentation",
                extra={"error": str(exc), "customers": len(customers)},
            )
            return fallback_segmentation(customers)

    def generate_customer_insights(self, customer: CustomerData) -> List[CustomerInsight]:
        try:
            obj = self.ai.generate_object(
                self._customer_insights_prompt(customer), CUSTOMER_INSIGHTS_SCHEMA
            )
            return _validate_items(obj.get("insights"), CustomerInsight, "customer_insight")
        except Exception as exc:
            logger.error(
                "Error generating customer insights",
                extra={"customer_id": customer.id, "error": str(exc)},
            )
            return []

    def predict_customer_lifetime_value(self, customer: CustomerData) -> float:
        """Model-estimated CLV; the stored value when the reply is not a number."""
        try:
            text = self.ai.generate_text(self._clv_prompt(customer), max_tokens=50)
            value = parse_leading_number(text)
            if value is None:
                logger.warning(
                    "CLV reply was not numeric",
                    extra={"customer_id": customer.id, "reply": text[:80]},
                )
                return customer.customer_lifetime_value
            return value
        except Exception as exc:
            logger.error(
                "Error predicting CLV",
                extra={"customer_id": customer.id, "error": str(exc)},
            )
            return customer.customer_lifetime_value

    def assess_customer_risk(
        self, customer: CustomerData, transactions: Sequence[Transaction]
    ) -> RiskAnalysis:
        try:
            obj = self.ai.generate_object(
                self._risk_prompt(customer, transactions), RISK_SCHEMA
            )
            raw_score = obj.get("riskScore")
            score = float(raw_score) if raw_score is not None else customer.risk_score
            return RiskAnalysis(
                risk_score=max(0.0, min(1.0, score)),
                risk_level=str(obj.get("riskLevel") or "medium").lower(),
                factors=[str(f) for f in obj.get("factors") or []],
                recommendations=[str(r) for r in obj.get("recommendations") or []],
            )
        except Exception as exc:
            logger.error(
                "Error assessing customer risk",
                extra={"customer_id": customer.id, "error": str(exc)},
            )
            score = max(0.0, min(1.0, customer.risk_score))
            return RiskAnalysis(
                risk_score=score,
                risk_level=risk_level_for(score),
                factors=["Unable to assess risk factors"],
                recommendations=["Manual review recommended"],
            )

    def generate_product_recommendations(
        self, customer: CustomerData
    ) -> List[ProductRecommendation]:
        try:
            obj = self.ai.generate_object(
                self._recommendations_prompt(customer), RECOMMENDATIONS_SCHEMA
            )
            return _validate_items(
                obj.get("recommendations"), ProductRecommendation, "product_recommendation"
            )
        except Exception as exc:
            logger.error(
                "Error generating product recommendations",
                extra={"customer_id": customer.id, "error": str(exc)},
            )
            return []

    def _segmentation_prompt(self, total: int, summary: list) -> str:
        return (
            "Analyze this banking customer data and create 4-6 meaningful customer "
            "segments based on behavior, value, and risk patterns.\n\n"
            f"Customer Data ({total} customers):\n{json.dumps(summary, indent=2)}\n\n"
            "Create segments that are actionable for banking strategies, distinct, "
            "based on multiple factors (not just balance), and include both "
            "high-value and growth opportunities.\n"
            "For each segment provide segmentName, customerIds, characteristics "
            "(average metrics) and 2-3 actionable insights.\n"
            "Consider patterns like high-value customers, young professionals, "
            "digital natives, risk-averse savers, active traders and dormant accounts."
        )

    def _customer_insights_prompt(self, c: CustomerData) -> str:
        return (
            "Analyze this individual banking customer profile and generate 3-5 "
            "actionable insights.\n\n"
            "Customer Profile:\n"
            f"- Balance: ${_money(c.account_balance)}\n"
            f"- Credit Score: {c.credit_score}\n"
            f"- Annual Income: ${_money(c.annual_income)}\n"
            f"- Risk Score: {c.risk_score}\n"
            f"- Transaction Count: {c.transaction_count}\n"
            f"- Account Age: {c.account_age} months\n"
            f"- Last Transaction: {c.last_transaction_days} days ago\n\n"
            "Cover product recommendations, risk assessment, engagement "
            "opportunities, revenue optimization and retention strategies. Each "
            "insight needs type, title, description, priority, confidence, "
            "recommendation and potentialRevenue."
        )

    def _clv_prompt(self, c: CustomerData) -> str:
        return (
            "Calculate the predicted Customer Lifetime Value (CLV) for this banking "
            "customer:\n\n"
            f"- Current Balance: ${c.account_balance}\n"
            f"- Annual Income: ${c.annual_income}\n"
            f"- Credit Score: {c.credit_score}\n"
            f"- Transaction Count: {c.transaction_count}\n"
            f"- Account Age: {c.account_age} months\n"
            f"- Risk Score: {c.risk_score}\n\n"
            "Consider revenue from fees and interest, cross-selling, retention "
            "probability, risk-adjusted returns and account growth.\n"
            "Return only the predicted CLV as a number (no currency symbols or text)."
        )

    def _risk_prompt(self, c: CustomerData, transactions: Sequence[Transaction]) -> str:
        recent = "\n".join(
            f"- {t.transaction_type}: ${t.amount} ({t.merchant_category or 'N/A'})"
            for t in list(transactions)[:RISK_TRANSACTION_SAMPLE]
        ) or "- none"
        return (
            "Assess the risk level for this banking customer:\n\n"
            f"- Balance: ${c.account_balance}\n"
            f"- Credit Score: {c.credit_score}\n"
            f"- Income: ${c.annual_income}\n"
            f"- Transaction Count: {c.transaction_count}\n"
            f"- Account Age: {c.account_age} months\n"
            f"- Current Risk Score: {c.risk_score}\n\n"
            f"Recent Transaction Patterns:\n{recent}\n\n"
            "Assess credit worthiness, transaction patterns, account behavior, "
            "income stability and fraud indicators. Provide riskScore (0.0-1.0), "
            f"riskLevel ({'/'.join(level.value for level in RiskLevel)}), "
            "factors and recommendations."
        )

    def _recommendations_prompt(self, c: CustomerData) -> str:
        return (
            "Generate personalized banking product recommendations for this customer:\n\n"
            f"- Balance: ${c.account_balance}\n"
            f"- Credit Score: {c.credit_score}\n"
            f"- Annual Income: ${c.annual_income}\n"
            f"- Risk Score: {c.risk_score}\n"
            f"- Transaction Activity: {c.transaction_count} transactions\n"
            f"- Account Age: {c.account_age} months\n\n"
            "Available products: savings accounts, credit cards, loans, investment "
            "products, insurance and business banking.\n"
            "Recommend 3-5 products with reasoning, expected revenue and "
            "recommendation score."
        )
