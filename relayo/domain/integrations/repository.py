"""Integration repository - Database operations for provider integrations"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models_integration import Integration, IntegrationProvider


class IntegrationRepository:
    """Repository for integration database operations"""

    @staticmethod
    def get_integrations(db: Session, workspace_id: int) -> list[Integration]:
        return (
            db.query(Integration)
            .filter(Integration.workspace_id == workspace_id)
            .order_by(Integration.created_at.asc())
            .all()
        )

    @staticmethod
    def get_by_provider(
        db: Session, workspace_id: int, provider: IntegrationProvider
    ) -> Optional[Integration]:
        """Get the workspace's integration for a provider (at most one exists)"""
        return (
            db.query(Integration)
            .filter(Integration.workspace_id == workspace_id, Integration.provider == provider.value)
            .first()
        )

    @staticmethod
    def get_twilio_by_number(db: Session, phone_number: str) -> Optional[Integration]:
        """Resolve the Twilio integration that owns an inbound number"""
        return (
            db.query(Integration)
            .filter(
                Integration.provider == IntegrationProvider.TWILIO.value,
                Integration.twilio_from_number == phone_number,
            )
            .first()
        )

    @staticmethod
    def get_syncable_google_integrations(db: Session) -> list[Integration]:
        """Google integrations with at least one calendar configured"""
        integrations = (
            db.query(Integration)
            .filter(Integration.provider == IntegrationProvider.GOOGLE.value)
            .order_by(Integration.id.asc())
            .all()
        )
        # JSON column: filter in Python to stay portable across SQLite/Postgres
        return [integration for integration in integrations if integration.google_calendar_ids]

    @staticmethod
    def upsert(db: Session, workspace_id: int, provider: IntegrationProvider, **fields) -> Integration:
        """Create or update the single (workspace, provider) row"""
        integration = IntegrationRepository.get_by_provider(db, workspace_id, provider)
        if not integration:
            integration = Integration(workspace_id=workspace_id, provider=provider.value)
            db.add(integration)

        for key, value in fields.items():
            setattr(integration, key, value)

        db.commit()
        db.refresh(integration)
        return integration
