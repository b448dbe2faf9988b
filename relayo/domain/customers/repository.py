"""Customer repository - Database operations for customers"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from ...models import Customer, Message


class CustomerRepository:
    """Repository for customer database operations"""

    @staticmethod
    def get_customers(db: Session, workspace_id: int, search: Optional[str] = None) -> list[Customer]:
        """Get workspace customers, newest first, with reservations and messages preloaded"""
        query = (
            db.query(Customer)
            .options(selectinload(Customer.reservations), selectinload(Customer.messages))
            .filter(Customer.workspace_id == workspace_id)
        )

        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Customer.name.ilike(pattern),
                    Customer.email.ilike(pattern),
                    Customer.phone.contains(search),
                )
            )

        return query.order_by(Customer.created_at.desc(), Customer.id.desc()).all()

    @staticmethod
    def get_customer_by_id(db: Session, customer_id: int, workspace_id: int) -> Optional[Customer]:
        return (
            db.query(Customer)
            .filter(Customer.id == customer_id, Customer.workspace_id == workspace_id)
            .first()
        )

    @staticmethod
    def find_by_phone_or_email(
        db: Session,
        workspace_id: int,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        exclude_id: Optional[int] = None,
    ) -> Optional[Customer]:
        """Soft-unique lookup: match on phone OR email, ignoring whichever is missing"""
        conditions = []
        if phone:
            conditions.append(Customer.phone == phone)
        if email:
            conditions.append(Customer.email == email)
        if not conditions:
            return None

        query = db.query(Customer).filter(Customer.workspace_id == workspace_id, or_(*conditions))
        if exclude_id is not None:
            query = query.filter(Customer.id != exclude_id)
        return query.order_by(Customer.id.asc()).first()

    @staticmethod
    def create_customer(db: Session, workspace_id: int, commit: bool = True, **customer_data) -> Customer:
        customer = Customer(workspace_id=workspace_id, **customer_data)
        db.add(customer)
        if commit:
            db.commit()
            db.refresh(customer)
        else:
            db.flush()
        return customer

    @staticmethod
    def update_customer(db: Session, customer: Customer, **updates) -> Customer:
        """Update a customer with provided fields"""
        for key, value in updates.items():
            if hasattr(customer, key):
                setattr(customer, key, value)

        db.commit()
        db.refresh(customer)
        return customer

    @staticmethod
    def get_customer_messages(db: Session, customer: Customer) -> list[Message]:
        """Messages exchanged with a customer, oldest first"""
        return (
            db.query(Message)
            .filter(Message.workspace_id == customer.workspace_id, Message.customer_id == customer.id)
            .order_by(Message.created_at.asc(), Message.id.asc())
            .all()
        )
