"""Authentication API endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload

from app.api.deps import get_current_user
from app.core.security import (
    consume_password_reset_token,
    create_user_token,
    get_password_hash,
    issue_password_reset_token,
    verify_password,
)
from app.database import get_db
from app.models import User, UserLearningLanguage
from app.schemas import (
    DataResponse,
    DetailsUpdate,
    EmptyResponse,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    PasswordUpdate,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    TokenUser,
    UserRead,
)

router = APIRouter()

DUPLICATE_ACCOUNT = "Email or username already exists. Please use a different one."


def _token_response(user: User) -> TokenResponse:
    return TokenResponse(token=create_user_token(user.id), user=TokenUser.model_validate(user))


def load_profile(db: Session, user_id: int) -> User:
    user = db.execute(
        select(User)
        .where(User.id == user_id)
        .options(
            selectinload(User.native_languages),
            selectinload(User.learning_languages).selectinload(UserLearningLanguage.language),
        )
    ).scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def _ensure_unique(db: Session, *, username: str | None, email: str | None, exclude_id: int | None = None) -> None:
    clauses = []
    if username is not None:
        clauses.append(User.username == username)
    if email is not None:
        clauses.append(User.email == email)
    if not clauses:
        return
    stmt = select(User.id).where(or_(*clauses))
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    if db.execute(stmt.limit(1)).first() is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_ACCOUNT)


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> TokenResponse:
    """Create an account and sign it in."""

    email = payload.email.lower()
    _ensure_unique(db, username=payload.username, email=email)
    user = User(
        username=payload.username,
        email=email,
        hashed_password=get_password_hash(payload.password),
        interests=[],
        is_online=True,
        last_active=datetime.now(timezone.utc),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return _token_response(user)


@router.post("/login", response_model=TokenResponse)
def login(credentials: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    user = db.execute(select(User).where(User.email == credentials.email.lower())).scalar_one_or_none()
    if user is None or not verify_password(credentials.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    user.is_online = True
    user.last_active = datetime.now(timezone.utc)
    db.commit()
    return _token_response(user)


@router.get("/logout", response_model=EmptyResponse)
def logout(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> EmptyResponse:
    current_user.is_online = False
    current_user.last_active = datetime.now(timezone.utc)
    db.commit()
    return EmptyResponse()


@router.get("/me", response_model=DataResponse[UserRead])
def read_me(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return DataResponse(data=UserRead.model_validate(load_profile(db, current_user.id)))


@router.put("/updatedetails", response_model=DataResponse[UserRead])
def update_details(
    payload: DetailsUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update profile fields; omitted fields are left untouched."""

    changes = payload.model_dump(exclude_unset=True)
    email = changes.get("email")
    if email is not None:
        changes["email"] = email = email.lower()
    _ensure_unique(db, username=changes.get("username"), email=email, exclude_id=current_user.id)

    location = changes.pop("location", None)
    if "location" in payload.model_fields_set:
        current_user.location_country = location.get("country") if location else None
        current_user.location_city = location.get("city") if location else None
    for field, value in changes.items():
        if value is None and field in ("username", "email", "interests"):
            continue
        setattr(current_user, field, value)
    db.commit()
    return DataResponse(data=UserRead.model_validate(load_profile(db, current_user.id)))


@router.put("/updatepassword", response_model=TokenResponse)
def update_password(
    payload: PasswordUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TokenResponse:
    if not verify_password(payload.current_password, current_user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Password is incorrect")
    current_user.hashed_password = get_password_hash(payload.new_password)
    db.commit()
    return _token_response(current_user)


@router.post("/forgotpassword", response_model=ForgotPasswordResponse)
def forgot_password(payload: ForgotPasswordRequest, db: Session = Depends(get_db)) -> ForgotPasswordResponse:
    """Issue a reset token.

    The token is returned in the body because no mail delivery is wired up.
    """

    user = db.execute(select(User).where(User.email == payload.email.lower())).scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="There is no user with that email")
    return ForgotPasswordResponse(reset_token=issue_password_reset_token(user.id))


@router.put("/resetpassword/{reset_token}", response_model=TokenResponse)
def reset_password(
    reset_token: str,
    payload: ResetPasswordRequest,
    db: Session = Depends(get_db),
) -> TokenResponse:
    user_id = consume_password_reset_token(reset_token)
    user = db.get(User, user_id) if user_id is not None else None
    if user is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired reset token")
    user.hashed_password = get_password_hash(payload.password)
    db.commit()
    return _token_response(user)
