# app/api/auth.py

from fastapi import APIRouter, Depends, HTTPException, Request

from app.api.deps import SESSION_KEY, get_authenticator
from app.models.users import LoginForm, SessionUser
from app.services.auth import Authenticator

router = APIRouter(tags=["auth"])


@router.post("/login", response_model=SessionUser)
async def login(
    form: LoginForm,
    request: Request,
    authenticator: Authenticator = Depends(get_authenticator),
) -> SessionUser:
    user = await authenticator.authenticate(form.email, form.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid credentials.")

    request.session[SESSION_KEY] = user.model_dump(mode="json")
    return user


@router.post("/logout", status_code=204)
async def logout(request: Request) -> None:
    request.session.clear()
