from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/")
async def root() -> dict[str, object]:
    return {"success": True, "message": "Home Services notification API is running"}
