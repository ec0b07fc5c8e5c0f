"""
Admin API endpoints.

Admins are the only users of the price endpoints; logging in returns the
bearer token those endpoints require.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from pricebook.core.database import get_db
from pricebook.core.auth import (
    create_access_token,
    get_current_user_email,
    get_password_hash,
    verify_password,
)
from pricebook.models.admin import Admin
from pricebook.schemas.admin import AdminCreate, AdminOut, AdminAuth, AdminAuthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/", response_model=AdminOut, status_code=status.HTTP_201_CREATED)
def create_admin(admin_data: AdminCreate, db: Session = Depends(get_db)):
    """
    Create a new admin user.

    Args:
        admin_data: Admin creation data with plain text password
        db: Database session

    Returns:
        Created admin information (without password)

    Raises:
        HTTPException 400: If email already exists
    """
    existing_admin = db.query(Admin).filter(Admin.email == admin_data.email).first()
    if existing_admin:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    new_admin = Admin(
        name=admin_data.name,
        email=admin_data.email,
        password=get_password_hash(admin_data.password)
    )

    db.add(new_admin)
    db.commit()
    db.refresh(new_admin)

    logger.info("Created admin %s", new_admin.email)
    return new_admin


@router.get("/", response_model=List[AdminOut])
def get_all_admins(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    _: str = Depends(get_current_user_email)
):
    """List admin users with pagination."""
    return db.query(Admin).order_by(Admin.id).offset(skip).limit(limit).all()


@router.get("/me", response_model=AdminOut)
def get_current_admin(
    db: Session = Depends(get_db),
    email: str = Depends(get_current_user_email)
):
    """Return the admin the bearer token belongs to."""
    admin = db.query(Admin).filter(Admin.email == email).first()
    if not admin:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Admin with email '{email}' not found"
        )
    return admin


@router.post("/login", response_model=AdminAuthResponse)
def login_admin(login_data: AdminAuth, db: Session = Depends(get_db)):
    """
    Authenticate an admin user and return an access token.

    Raises:
        HTTPException 401: If credentials are invalid
    """
    admin = db.query(Admin).filter(Admin.email == login_data.email).first()
    if not admin or not verify_password(login_data.password, admin.password):
        logger.warning("Failed login attempt for %s", login_data.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(data={
        "admin_id": admin.id,
        "email": admin.email,
        "name": admin.name,
    })

    return AdminAuthResponse(
        access_token=access_token,
        token_type="bearer",
        admin=AdminOut.model_validate(admin)
    )
