"""Shared FastAPI dependencies.

Everything a handler needs (settings, session, storage, acting user) comes in
through here, so tests and a future auth layer can swap any of it with
``app.dependency_overrides``.
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from apps.crm.config import Settings
from apps.crm.database import get_db
from apps.crm.services.customers import CustomerService
from apps.crm.services.file_upload import FileUploadService
from apps.crm.services.followups import FollowUpService
from apps.crm.services.storage import Storage
from apps.crm.services.users import ActorResolver, DefaultUserResolver, FirstUserResolver


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_customer_service(db: Session = Depends(get_db)) -> CustomerService:
    return CustomerService(db)


def get_follow_up_service(db: Session = Depends(get_db)) -> FollowUpService:
    return FollowUpService(db)


def get_upload_service(
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
) -> FileUploadService:
    return FileUploadService(storage, settings.max_upload_size_bytes)


def get_customer_actor(settings: Settings = Depends(get_app_settings)) -> ActorResolver:
    """Owner of newly created customers: the default sales user."""
    return DefaultUserResolver(settings.default_user_email, settings.default_user_name)


def get_follow_up_actor(settings: Settings = Depends(get_app_settings)) -> ActorResolver:
    """Author of new follow-up records, picked per FOLLOW_UP_ACTOR."""
    if settings.follow_up_actor == "default_user":
        return DefaultUserResolver(settings.default_user_email, settings.default_user_name)
    return FirstUserResolver()
