# pavilion/services/auth_services/auth_service.py
from datetime import datetime, timedelta, timezone
import logging
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.exc import IntegrityError

from pavilion.models.user_models import User
from pavilion.models.customer_models import Customer
from pavilion.core.security import verify_password, hash_password, create_access_token
from pavilion.core.config import ACCESS_TOKEN_EXPIRE_MINUTES, ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES, ADMIN_ROLES
from pavilion.schemas.user_schemas import B2BRegistration, TokenResponse, MessageResponse
from pavilion.utils.activity_helpers import log_activity

logger = logging.getLogger(__name__)


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    result = await db.execute(select(User).where(User.email == email.lower()))
    user = result.scalars().first()
    if not user or not verify_password(password, user.password_hash):
        logger.info("Failed login for %s", email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive.")
    return user


def create_token_for(user: User) -> str:
    expire_minutes = ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES if user.role in ADMIN_ROLES else ACCESS_TOKEN_EXPIRE_MINUTES
    return create_access_token(
        {"sub": user.email, "user_id": user.id, "role": user.role},
        token_version=user.token_version,
        expires_delta=timedelta(minutes=expire_minutes),
    )


async def login(db: AsyncSession, email: str, password: str) -> TokenResponse:
    user = await authenticate_user(db, email, password)
    user.last_login = datetime.now(timezone.utc)
    await db.commit()
    return TokenResponse(access_token=create_token_for(user), role=user.role)


async def logout_user(db: AsyncSession, user: User) -> MessageResponse:
    # Bumping the version invalidates every token issued so far
    user.token_version = (user.token_version or 0) + 1
    await db.commit()
    return MessageResponse(message="Logged out successfully")


async def register_b2b_customer(db: AsyncSession, data: B2BRegistration) -> Customer:
    email = data.email.lower()
    existing = await db.execute(select(User).where(User.email == email))
    if existing.scalars().first():
        raise HTTPException(status_code=400, detail="An account with this email already exists.")

    try:
        user = User(
            email=email,
            name=data.name,
            password_hash=hash_password(data.password),
            role="customer",
            is_active=True,
        )
        db.add(user)
        await db.flush()

        customer = Customer(
            name=data.name,
            company_name=data.company_name,
            email=email,
            phone=data.phone,
            gst_number=data.gst_number,
            address=data.address,
            status="pending",
            user_id=user.id,
        )
        db.add(customer)
        await db.flush()

        await log_activity(
            db,
            event_type="b2b_registration",
            description=f"B2B registration received from '{data.company_name or data.name}' ({email}).",
            customer_id=customer.id,
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="Customer with this email already exists.")

    logger.info("B2B registration pending approval: customer %s", customer.id)
    result = await db.execute(
        select(Customer).where(Customer.id == customer.id).execution_options(populate_existing=True)
    )
    return result.scalar_one()
