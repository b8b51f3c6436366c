"""Pydantic schemas for API payloads."""

from .auth import (
    DetailsUpdate,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    PasswordUpdate,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    TokenUser,
)
from .common import (
    APIModel,
    DataResponse,
    EmptyResponse,
    ListResponse,
    MessageResponse,
    PagedResponse,
    paginate,
)
from .languages import LanguageCreate, LanguageRead, LanguageUpdate
from .messages import (
    ConversationCreate,
    ConversationRead,
    ConversationSummary,
    MessageCreate,
    MessageRead,
)
from .translations import CorrectionRequest, TranslateRequest, TranslationResult
from .users import (
    LanguagesUpdate,
    Location,
    ProfilePictureUpdate,
    PublicUser,
    Recommendation,
    UserRead,
)
from .voice_rooms import (
    DeafenState,
    JoinRequest,
    MuteState,
    VoiceRoomCreate,
    VoiceRoomRead,
    VoiceRoomUpdate,
)

__all__ = [
    "APIModel",
    "DataResponse",
    "EmptyResponse",
    "ListResponse",
    "MessageResponse",
    "PagedResponse",
    "paginate",
    "RegisterRequest",
    "LoginRequest",
    "TokenResponse",
    "TokenUser",
    "DetailsUpdate",
    "PasswordUpdate",
    "ForgotPasswordRequest",
    "ForgotPasswordResponse",
    "ResetPasswordRequest",
    "LanguageCreate",
    "LanguageRead",
    "LanguageUpdate",
    "ConversationCreate",
    "ConversationRead",
    "ConversationSummary",
    "MessageCreate",
    "MessageRead",
    "CorrectionRequest",
    "TranslateRequest",
    "TranslationResult",
    "LanguagesUpdate",
    "Location",
    "ProfilePictureUpdate",
    "PublicUser",
    "Recommendation",
    "UserRead",
    "DeafenState",
    "JoinRequest",
    "MuteState",
    "VoiceRoomCreate",
    "VoiceRoomRead",
    "VoiceRoomUpdate",
]
