# app/api/deps.py

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncEngine

from app.config import get_settings
from app.db.engine import get_engine
from app.models.users import SessionUser
from app.services.actions import InvoiceActions
from app.services.auth import Authenticator
from app.services.data import DashboardData

SESSION_KEY = "user"


def get_data(engine: AsyncEngine = Depends(get_engine)) -> DashboardData:
    return DashboardData(engine)


def get_actions(engine: AsyncEngine = Depends(get_engine)) -> InvoiceActions:
    return InvoiceActions(engine, timezone=get_settings().invoice_timezone)


def get_authenticator(engine: AsyncEngine = Depends(get_engine)) -> Authenticator:
    return Authenticator(engine)


def require_user(request: Request) -> SessionUser:
    """Reject requests without a logged-in session."""
    user = request.session.get(SESSION_KEY)
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return SessionUser(**user)
