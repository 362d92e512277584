from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.schemas import ProfileChangeLogCreate, ProfileChangeLogRead
from app.security import CallerContext, ensure_self_or_admin, require_admin, require_caller
from app.services.notifications import notify_admins_best_effort
from app.services.profile_changes import build_change_message, list_profile_changes, record_profile_change

router = APIRouter(prefix="/profile-change-logs", tags=["profile-change-logs"])


@router.post("", response_model=ProfileChangeLogRead, status_code=status.HTTP_201_CREATED)
def create_profile_change_log(
    payload: ProfileChangeLogCreate,
    background_tasks: BackgroundTasks,
    caller: CallerContext = Depends(require_caller),
    db: Session = Depends(get_db),
) -> ProfileChangeLogRead:
    employee_id = payload.employee_id or caller.employee_id
    ensure_self_or_admin(caller, employee_id)
    change = record_profile_change(
        db,
        employee_id=employee_id,
        changed_field=payload.changed_field,
        old_value=payload.old_value,
        new_value=payload.new_value,
    )
    # Runs after the response; a failed notification never affects the logged change.
    background_tasks.add_task(notify_admins_best_effort, change.employee_id, build_change_message(change))
    return ProfileChangeLogRead.model_validate(change)


@router.get("", response_model=list[ProfileChangeLogRead])
def all_profile_change_logs(
    _admin: CallerContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[ProfileChangeLogRead]:
    return [ProfileChangeLogRead.model_validate(item) for item in list_profile_changes(db)]


@router.get("/employee/{employee_id}", response_model=list[ProfileChangeLogRead])
def employee_profile_change_logs(
    employee_id: str,
    _admin: CallerContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[ProfileChangeLogRead]:
    return [
        ProfileChangeLogRead.model_validate(item)
        for item in list_profile_changes(db, employee_id=employee_id)
    ]
