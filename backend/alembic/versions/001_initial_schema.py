"""Initial schema — provider credit state and usage log, seeded providers.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2026-10-18
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# (codename, upstream model, daily limit, monthly limit); 0 = unlimited
_PROVIDERS = (
    ("Orion", "LLaMA-3.1 70B", 14400, 0),
    ("Titan", "Mixtral 8x7B", 1000, 30000),
    ("Nova", "Gemma 7B", 0, 0),
    ("Athena", "Claude Haiku", 500, 10000),
    ("Vox", "ElevenLabs", 100, 1000),
    ("Aether", "Azure TTS", 500, 5000),
    ("Echo", "Whisper", 0, 0),
)


def upgrade() -> None:
    # ── Provider credit state ─────────────────────────────────
    ai_models = op.create_table(
        "ai_models",
        sa.Column("codename", sa.String(32), primary_key=True),
        sa.Column("original_name", sa.String(100), nullable=False, server_default=""),
        sa.Column("credit_status", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("daily_usage", sa.Integer, nullable=False, server_default="0"),
        sa.Column("monthly_usage", sa.Integer, nullable=False, server_default="0"),
        sa.Column("daily_limit", sa.Integer, nullable=False, server_default="0"),
        sa.Column("monthly_limit", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_reset_daily", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_reset_monthly", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_checked", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("daily_usage >= 0 AND monthly_usage >= 0", name="ck_ai_models_usage_non_negative"),
        sa.CheckConstraint("daily_limit >= 0 AND monthly_limit >= 0", name="ck_ai_models_limit_non_negative"),
    )
    op.create_index("ix_ai_models_credit_status", "ai_models", ["credit_status"])

    # ── Usage log (append-only) ───────────────────────────────
    op.create_table(
        "ai_usage_tracking",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("model_codename", sa.String(32), nullable=False, index=True),
        sa.Column("session_id", sa.Text, nullable=False, server_default=""),
        sa.Column("requests_made", sa.Integer, nullable=False, server_default="1"),
        sa.Column("tokens_used", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_ai_usage_tracking_created", "ai_usage_tracking", ["created_at"])

    # ── Seed providers ────────────────────────────────────────
    now = datetime.now(timezone.utc)
    op.bulk_insert(
        ai_models,
        [
            {
                "codename": codename,
                "original_name": name,
                "credit_status": True,
                "daily_usage": 0,
                "monthly_usage": 0,
                "daily_limit": daily,
                "monthly_limit": monthly,
                "last_reset_daily": now,
                "last_reset_monthly": now,
                "last_checked": now,
            }
            for codename, name, daily, monthly in _PROVIDERS
        ],
    )


def downgrade() -> None:
    op.drop_index("ix_ai_usage_tracking_created", table_name="ai_usage_tracking")
    op.drop_table("ai_usage_tracking")
    op.drop_index("ix_ai_models_credit_status", table_name="ai_models")
    op.drop_table("ai_models")
