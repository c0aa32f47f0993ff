# barbershop/deps.py

from typing import Optional

from fastapi import Header, HTTPException

from barbershop.schemas import UserRole


# Authentication happens at the gateway, which forwards who the caller is
def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> dict:
    return {"id": x_user_id, "role": x_user_role}


def require_role(user: dict, role: UserRole):
    if user["role"] != role.value:
        raise HTTPException(status_code=403, detail="Forbidden")
