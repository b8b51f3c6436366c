from fastapi import APIRouter

from app.api.auth import router as auth_router
from app.api.languages import router as languages_router
from app.api.messages import router as messages_router
from app.api.translations import router as translations_router
from app.api.users import router as users_router
from app.api.voice_rooms import router as voice_rooms_router

router = APIRouter()

router.include_router(auth_router, prefix="/auth", tags=["auth"])
router.include_router(users_router, prefix="/users", tags=["users"])
router.include_router(languages_router, prefix="/languages", tags=["languages"])
router.include_router(messages_router, prefix="/messages", tags=["messages"])
router.include_router(voice_rooms_router, prefix="/voice-rooms", tags=["voice-rooms"])
router.include_router(translations_router, prefix="/translations", tags=["translations"])


@router.get("/", tags=["root"])
def read_root() -> dict[str, str]:
    return {"message": "Welcome to the Parley API"}
