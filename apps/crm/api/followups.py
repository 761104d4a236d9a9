"""Follow-up record endpoints."""

from fastapi import APIRouter, Depends

from apps.crm.api.deps import get_follow_up_actor, get_follow_up_service
from apps.crm.schemas import ApiResponse, FollowUpCreate, FollowUpResponse
from apps.crm.services.followups import FollowUpService
from apps.crm.services.users import ActorResolver

router = APIRouter()


@router.get("/customers/{customer_id}/followups", response_model=ApiResponse[list[FollowUpResponse]])
async def list_follow_ups(
    customer_id: str, service: FollowUpService = Depends(get_follow_up_service)
):
    """
    List a customer's follow-up records, newest first.

    Attachments are ordered oldest first and next-step plans soonest due first.
    """
    return ApiResponse(data=service.list_follow_ups(customer_id))


@router.post(
    "/customers/{customer_id}/followups",
    response_model=ApiResponse[FollowUpResponse],
    status_code=201,
)
async def create_follow_up(
    customer_id: str,
    payload: FollowUpCreate,
    service: FollowUpService = Depends(get_follow_up_service),
    actor: ActorResolver = Depends(get_follow_up_actor),
):
    """
    Log a follow-up with optional attachments and a next-step reminder.

    The record, its attachments and the plan are written atomically.
    """
    record = service.create_follow_up(customer_id, payload, actor)
    return ApiResponse(data=record, message="Follow-up record created")
