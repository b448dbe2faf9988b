"""Customer router - FastAPI endpoints for customer operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ..messages.schemas import MessageResponse
from .schemas import CustomerCreate, CustomerResponse, CustomerUpdate
from .service import CustomerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["Customers"])


def get_customer_service(db: Session = Depends(get_db)) -> CustomerService:
    """Dependency injection for CustomerService"""
    return CustomerService(db)


@router.get("", response_model=list[CustomerResponse])
async def get_customers(
    search: Optional[str] = Query(None, max_length=200),
    current_user: User = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service),
):
    """List workspace customers with their five latest reservations and messages"""
    customers = service.get_customers(current_user, search=search)
    return [CustomerResponse.from_model(c) for c in customers]


@router.post("", response_model=CustomerResponse, status_code=201)
async def create_customer(
    data: CustomerCreate,
    current_user: User = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service),
):
    customer = service.create_customer(data, current_user)
    return CustomerResponse.from_model(customer)


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: int,
    current_user: User = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service),
):
    return CustomerResponse.from_model(service.get_customer(customer_id, current_user))


@router.patch("/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: int,
    data: CustomerUpdate,
    current_user: User = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service),
):
    customer = service.update_customer(customer_id, data, current_user)
    return CustomerResponse.from_model(customer)


@router.get("/{customer_id}/messages", response_model=list[MessageResponse])
async def get_customer_messages(
    customer_id: int,
    current_user: User = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service),
):
    """Full message history with a customer, oldest first"""
    messages = service.get_customer_messages(customer_id, current_user)
    return [MessageResponse.from_model(m) for m in messages]
