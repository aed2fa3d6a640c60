from fastapi import APIRouter

router = APIRouter()

@router.get("/")
def root():
    return {
        "name": "Staffboard Resource Backend",
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
    }
