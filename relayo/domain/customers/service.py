"""Customer service - Business logic for customer operations"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Customer, Message, User
from .repository import CustomerRepository
from .schemas import CustomerCreate, CustomerUpdate

logger = logging.getLogger(__name__)


class CustomerService:
    """Service layer for customer business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CustomerRepository()

    def get_customers(self, user: User, search: Optional[str] = None) -> list[Customer]:
        return self.repo.get_customers(self.db, user.workspace_id, search=search)

    def get_customer(self, customer_id: int, user: User) -> Customer:
        """Get a customer owned by the user's workspace"""
        customer = self.repo.get_customer_by_id(self.db, customer_id, user.workspace_id)
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")
        return customer

    def create_customer(self, data: CustomerCreate, user: User) -> Customer:
        """Create a customer unless one with the same phone or email already exists"""
        existing = self.repo.find_by_phone_or_email(
            self.db, user.workspace_id, phone=data.phone, email=data.email
        )
        if existing:
            logger.info(f"⚠️ Duplicate customer rejected in workspace {user.workspace_id} (matches {existing.id})")
            raise HTTPException(status_code=409, detail="Customer with this phone or email already exists")

        customer = self.repo.create_customer(
            self.db,
            user.workspace_id,
            name=data.name,
            phone=data.phone,
            email=data.email,
            notes=data.notes,
        )
        logger.info(f"✅ Created customer {customer.id} in workspace {user.workspace_id}")
        return customer

    def update_customer(self, customer_id: int, data: CustomerUpdate, user: User) -> Customer:
        customer = self.get_customer(customer_id, user)
        updates = data.model_dump(exclude_unset=True)

        if updates.get("phone") or updates.get("email"):
            clash = self.repo.find_by_phone_or_email(
                self.db,
                user.workspace_id,
                phone=updates.get("phone"),
                email=updates.get("email"),
                exclude_id=customer.id,
            )
            if clash:
                raise HTTPException(status_code=409, detail="Customer with this phone or email already exists")

        return self.repo.update_customer(self.db, customer, **updates)

    def get_customer_messages(self, customer_id: int, user: User) -> list[Message]:
        customer = self.get_customer(customer_id, user)
        return self.repo.get_customer_messages(self.db, customer)

    def find_or_create(
        self,
        workspace_id: int,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        commit: bool = True,
    ) -> Customer:
        """Soft-unique resolution used by booking and inbound SMS"""
        customer = self.repo.find_by_phone_or_email(self.db, workspace_id, phone=phone, email=email)
        if customer:
            return customer

        logger.info(f"🆕 Creating customer for {phone or email} in workspace {workspace_id}")
        return self.repo.create_customer(
            self.db, workspace_id, commit=commit, name=name or phone, phone=phone, email=email
        )
