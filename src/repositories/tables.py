"""SQLAlchemy Core table definitions for the hosted collections."""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)

metadata = MetaData()


def _timestamps():
    return [
        Column("created_at", DateTime(timezone=True), index=True),
        Column("updated_at", DateTime(timezone=True)),
    ]


customers = Table(
    "customers",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("user_id", String(64), index=True),
    Column("customer_number", String(16), index=True),
    Column("first_name", String(64)),
    Column("last_name", String(64)),
    Column("email", String(255)),
    Column("phone", String(32)),
    Column("date_of_birth", Date),
    Column("address", String(255)),
    Column("city", String(64)),
    Column("state", String(8)),
    Column("zip_code", String(10)),
    Column("country", String(2)),
    Column("account_balance", Float),
    Column("credit_score", Integer),
    Column("annual_income", Float),
    Column("employment_status", String(32)),
    Column("account_type", String(32)),
    Column("account_opened_date", Date),
    Column("last_transaction_date", Date),
    Column("transaction_count", Integer),
    Column("avg_monthly_balance", Float),
    Column("risk_score", Float),
    Column("customer_lifetime_value", Float),
    Column("preferred_channel", String(32)),
    Column("kyc_status", String(16)),
    Column("is_active", Boolean),
    *_timestamps(),
)

transactions = Table(
    "transactions",
    metadata,
    Column("id", String(96), primary_key=True),
    Column("user_id", String(64), index=True),
    Column("customer_id", String(64), index=True),
    Column("transaction_type", String(16)),
    Column("amount", Float),
    Column("description", String(255)),
    Column("merchant_category", String(32)),
    Column("channel", String(32)),
    Column("location", String(96)),
    Column("is_recurring", Boolean),
    Column("risk_flag", Boolean),
    Column("transaction_date", DateTime(timezone=True), index=True),
    *_timestamps(),
)

customer_interactions = Table(
    "customer_interactions",
    metadata,
    Column("id", String(96), primary_key=True),
    Column("user_id", String(64), index=True),
    Column("customer_id", String(64), index=True),
    Column("interaction_type", String(16)),
    Column("channel", String(16)),
    Column("subject", String(96)),
    Column("description", Text),
    Column("outcome", String(16)),
    Column("satisfaction_score", Integer),
    Column("agent_id", String(32)),
    Column("duration_minutes", Integer),
    Column("interaction_date", DateTime(timezone=True)),
    *_timestamps(),
)

customer_segments = Table(
    "customer_segments",
    metadata,
    Column("id", String(96), primary_key=True),
    Column("user_id", String(64), index=True),
    Column("segment_name", String(128)),
    Column("description", Text),
    Column("criteria", Text),
    Column("customer_count", Integer),
    Column("avg_balance", Float),
    Column("total_revenue", Float),
    Column("growth_rate", Float),
    Column("risk_level", String(16)),
    Column("is_active", Boolean),
    *_timestamps(),
)

customer_segment_assignments = Table(
    "customer_segment_assignments",
    metadata,
    Column("id", String(96), primary_key=True),
    Column("user_id", String(64), index=True),
    Column("customer_id", String(64), index=True),
    Column("segment_id", String(96), index=True),
    Column("confidence_score", Float),
    *_timestamps(),
)

ai_insights = Table(
    "ai_insights",
    metadata,
    Column("id", String(96), primary_key=True),
    Column("user_id", String(64), index=True),
    Column("title", String(255)),
    Column("description", Text),
    Column("insight_type", String(32)),
    Column("priority", String(16)),
    Column("confidence_score", Float),
    Column("status", String(16), index=True),
    Column("customer_id", String(64)),
    Column("segment_id", String(96)),
    *_timestamps(),
)

risk_assessments = Table(
    "risk_assessments",
    metadata,
    Column("id", String(96), primary_key=True),
    Column("user_id", String(64), index=True),
    Column("customer_id", String(64), index=True),
    Column("assessment_type", String(32)),
    Column("risk_score", Float),
    Column("risk_level", String(16)),
    Column("factors", Text),
    Column("recommendations", Text),
    Column("status", String(16), index=True),
    Column("assessed_date", DateTime(timezone=True), index=True),
    Column("expires_date", DateTime(timezone=True)),
    *_timestamps(),
)

# Hosted collection name -> table.
COLLECTIONS = {
    "customers": customers,
    "transactions": transactions,
    "customerInteractions": customer_interactions,
    "customerSegments": customer_segments,
    "customerSegmentAssignments": customer_segment_assignments,
    "aiInsights": ai_insights,
    "riskAssessments": risk_assessments,
}
