"""Reservation repository - Database operations for reservations"""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ...models import Customer, Reservation


class ReservationRepository:
    """Repository for reservation database operations"""

    @staticmethod
    def get_reservations(
        db: Session,
        workspace_id: int,
        status: Optional[str] = None,
        source: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Reservation]:
        """Workspace reservations with customer, latest start first"""
        query = (
            db.query(Reservation)
            .outerjoin(Reservation.customer)
            .options(joinedload(Reservation.customer))
            .filter(Reservation.workspace_id == workspace_id)
        )

        if status:
            query = query.filter(Reservation.status == status)
        if source:
            query = query.filter(Reservation.source == source)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Reservation.title.ilike(pattern),
                    Customer.name.ilike(pattern),
                    Customer.phone.contains(search),
                )
            )

        return query.order_by(Reservation.start.desc(), Reservation.id.desc()).all()

    @staticmethod
    def get_reservation_by_id(db: Session, reservation_id: int, workspace_id: int) -> Optional[Reservation]:
        return (
            db.query(Reservation)
            .options(joinedload(Reservation.customer), joinedload(Reservation.integration))
            .filter(Reservation.id == reservation_id, Reservation.workspace_id == workspace_id)
            .first()
        )

    @staticmethod
    def get_by_event_id(db: Session, event_id: str) -> Optional[Reservation]:
        """Event ids are unique system-wide"""
        return db.query(Reservation).filter(Reservation.event_id == event_id).first()

    @staticmethod
    def get_with_customer(db: Session, reservation_id: int) -> Optional[Reservation]:
        return (
            db.query(Reservation)
            .options(joinedload(Reservation.customer))
            .filter(Reservation.id == reservation_id)
            .first()
        )

    @staticmethod
    def get_in_range(
        db: Session, workspace_id: int, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> list[Reservation]:
        """Reservations starting inside [start, end], oldest first; unbounded unless both are given"""
        query = (
            db.query(Reservation)
            .options(joinedload(Reservation.customer))
            .filter(Reservation.workspace_id == workspace_id)
        )
        if start is not None and end is not None:
            query = query.filter(Reservation.start >= start, Reservation.start <= end)
        return query.order_by(Reservation.start.asc(), Reservation.id.asc()).all()

    @staticmethod
    def create_reservation(db: Session, workspace_id: int, **reservation_data) -> Reservation:
        reservation = Reservation(workspace_id=workspace_id, **reservation_data)
        db.add(reservation)
        db.commit()
        db.refresh(reservation)
        return reservation

    @staticmethod
    def update_reservation(db: Session, reservation: Reservation, **updates) -> Reservation:
        for key, value in updates.items():
            if hasattr(reservation, key):
                setattr(reservation, key, value)

        db.commit()
        db.refresh(reservation)
        return reservation

    @staticmethod
    def delete_reservation(db: Session, reservation: Reservation) -> None:
        db.delete(reservation)
        db.commit()
