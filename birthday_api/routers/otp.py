from typing import Any

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from birthday_api.context import AppContext, get_context

router = APIRouter(prefix="/api/otp", tags=["OTP"])


# Stand-in verification: one fixed code, no expiry or per-user binding
@router.post("/verify")
def verify_otp(body: Any = Body(default=None), context: AppContext = Depends(get_context)):
    otp = body.get("otp") if isinstance(body, dict) else None
    if isinstance(otp, str) and otp == context.settings.MOCK_OTP_CODE:
        return {"ok": True}
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"ok": False, "message": "Invalid OTP"},
    )
