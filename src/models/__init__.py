"""Pydantic models for records and API payloads."""

from models.analytics import (  # noqa: F401
    AnalyticsSummary,
    DashboardMetrics,
    DistributionSlice,
    MonthlyTransactions,
    SegmentPerformance,
)
from models.auth import AuthSession, AuthUser, LoginRequest  # noqa: F401
from models.customer import (  # noqa: F401
    Customer,
    CustomerData,
    CustomerInteraction,
    CustomerSummary,
    Transaction,
)
from models.insight import (  # noqa: F401
    AIInsight,
    CustomerInsight,
    GeneratedInsight,
    InsightType,
    ProductRecommendation,
)
from models.risk import (  # noqa: F401
    RecordStatus,
    RiskAnalysis,
    RiskAssessmentRecord,
    RiskLevel,
    RiskRunSummary,
)
from models.segment import (  # noqa: F401
    CustomerSegment,
    SegmentAssignment,
    SegmentationResult,
    SegmentCharacteristics,
)
