"""Customer endpoints."""

from fastapi import APIRouter, Depends

from apps.crm.api.deps import get_customer_actor, get_customer_service
from apps.crm.schemas import (
    ApiResponse,
    CustomerCreate,
    CustomerDetail,
    CustomerListItem,
    CustomerRef,
    CustomerResponse,
    CustomerUpdate,
    DeletedResponse,
)
from apps.crm.services.customers import CustomerService
from apps.crm.services.users import ActorResolver

router = APIRouter()


@router.get("/customers", response_model=ApiResponse[list[CustomerListItem]])
async def list_customers(service: CustomerService = Depends(get_customer_service)):
    """
    List all customers with their latest follow-up.

    Customers followed up most recently come first; customers that were
    never followed up come last, newest first.
    """
    return ApiResponse(data=service.list_customers())


@router.post("/customers", response_model=ApiResponse[CustomerResponse], status_code=201)
async def create_customer(
    payload: CustomerCreate,
    service: CustomerService = Depends(get_customer_service),
    actor: ActorResolver = Depends(get_customer_actor),
):
    """
    Create a customer.

    Args:
        payload: Customer fields
        service: Customer service
        actor: Resolves the owning user

    Returns:
        The created customer
    """
    customer = service.create_customer(payload, actor)
    return ApiResponse(data=customer, message="Customer created")


# Declared before /customers/{customer_id} so "first" is not taken as an id
@router.get("/customers/first", response_model=ApiResponse[CustomerRef])
async def get_first_customer(service: CustomerService = Depends(get_customer_service)):
    """Earliest created customer, used by clients to redirect away from a missing one."""
    return ApiResponse(data=service.get_first_customer())


@router.get("/customers/{customer_id}", response_model=ApiResponse[CustomerDetail])
async def get_customer(customer_id: str, service: CustomerService = Depends(get_customer_service)):
    """Customer detail with follow-up and next-step counts."""
    return ApiResponse(data=service.get_customer_detail(customer_id))


@router.put("/customers/{customer_id}", response_model=ApiResponse[CustomerResponse])
async def update_customer(
    customer_id: str,
    payload: CustomerUpdate,
    service: CustomerService = Depends(get_customer_service),
):
    """Update the supplied customer fields."""
    customer = service.update_customer(customer_id, payload)
    return ApiResponse(data=customer, message="Customer updated")


@router.delete("/customers/{customer_id}", response_model=ApiResponse[DeletedResponse])
async def delete_customer(customer_id: str, service: CustomerService = Depends(get_customer_service)):
    """Delete a customer together with its follow-ups, attachments and plans."""
    deleted_id = service.delete_customer(customer_id)
    return ApiResponse(data=DeletedResponse(id=deleted_id), message="Customer deleted")
