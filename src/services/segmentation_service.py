"""
Segmentation Service.

Runs AI (or rule-based) segmentation over the customer base and persists
the resulting segments with their customer assignments.
"""

from __future__ import annotations

import json
import random
import uuid
from typing import List, Optional

from models.customer import Customer
from models.segment import CustomerSegment, SegmentationResult
from repositories.database import Database, get_database
from services.customer_service import to_customer_data
from services.data_seeder import DataSeeder
from services.ml_engine import MLEngine
from services.scoring import risk_level_for
from utils.error_handling import NotFoundError
from utils.logging_config import get_logger
from utils.settings import AppSettings

logger = get_logger(__name__)

GROWTH_RATE_RANGE = (-5.0, 15.0)
CONFIDENCE_RANGE = (0.85, 1.0)


class SegmentationService:
    def __init__(
        self,
        database: Optional[Database] = None,
        engine: Optional[MLEngine] = None,
        settings: Optional[AppSettings] = None,
        rng: Optional[random.Random] = None,
    ):
        self.db = database or get_database()
        self.settings = settings or AppSettings.from_environment()
        self._engine = engine
        self.rng = rng or random.Random(self.settings.random_seed)

    @property
    def engine(self) -> MLEngine:
        if self._engine is None:
            self._engine = MLEngine()
        return self._engine

    def list_segments(self) -> List[CustomerSegment]:
        rows = self.db.customer_segments.list(order_by={"created_at": "desc"})
        return [CustomerSegment.model_validate(row) for row in rows]

    def generate_segmentation(self, user_id: str) -> List[SegmentationResult]:
        """Segment the customer base and store segments plus assignments."""
        rows = self.db.customers.list(limit=self.settings.customer_fetch_limit)
        if not rows:
            logger.warning("No customers available for segmentation")
            return []

        customers = [to_customer_data(Customer.model_validate(row)) for row in rows]
        results = self.engine.perform_customer_segmentation(customers)

        for result in results:
            self._store_segment(user_id, result)
        logger.info(
            "Segmentation stored",
            extra={"segments": len(results), "customers": len(customers)},
        )
        return results

    def segment_customers(self, segment_id: str) -> List[Customer]:
        """Customers assigned to a segment."""
        if not self.db.customer_segments.get(segment_id):
            raise NotFoundError(f"Segment '{segment_id}' not found")
        assignments = self.db.customer_segment_assignments.list(where={"segment_id": segment_id})
        assigned = {a["customer_id"] for a in assignments}
        if not assigned:
            return []
        rows = self.db.customers.list(where={"id": sorted(assigned)})
        return [Customer.model_validate(row) for row in rows]

    def seed_segments(self, user_id: str) -> int:
        return DataSeeder(self.db, seed=self.settings.random_seed).seed_customer_segments(user_id)

    def _store_segment(self, user_id: str, result: SegmentationResult) -> None:
        chars = result.characteristics
        self.db.customer_segments.create(
            {
                "id": result.segment_id,
                "user_id": user_id,
                "segment_name": result.segment_name,
                "description": ". ".join(result.insights),
                "criteria": json.dumps(
                    {"aiGenerated": True, "characteristics": chars.model_dump()}
                ),
                "customer_count": chars.size,
                "avg_balance": chars.avg_balance,
                "total_revenue": chars.avg_balance * chars.size,
                "growth_rate": self.rng.uniform(*GROWTH_RATE_RANGE),
                "risk_level": risk_level_for(chars.avg_risk_score),
                "is_active": True,
            }
        )
        self.db.customer_segment_assignments.create_many(
            {
                "id": f"assign_{uuid.uuid4().hex[:16]}",
                "user_id": user_id,
                "customer_id": customer_id,
                "segment_id": result.segment_id,
                "confidence_score": self.rng.uniform(*CONFIDENCE_RANGE),
            }
            for customer_id in result.customers
        )
