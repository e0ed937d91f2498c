from fastapi import Request, HTTPException, Depends
from typing import Optional, Dict, Any
import logging
import laundry.infra.supabase_client as supabase_client

COOKIE_NAME = "sb_access"

logger = logging.getLogger(__name__)

def get_access_token(request: Request) -> Optional[str]:
    # Hybride: priorité au Bearer, fallback cookie
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        if token:
            return token
    return request.cookies.get(COOKIE_NAME) or None

def user_from_access_token(access_token: str) -> Dict[str, Any]:
    """Récupère et normalise l’utilisateur depuis supabase.auth.get_user(access_token)."""
    res = supabase_client.get_supabase().auth.get_user(access_token)
    user = getattr(res, "user", None)
    if not user:
        return {}
    if isinstance(user, dict):
        meta = user.get("user_metadata") or {}
        return {"id": user.get("id"), "email": user.get("email"), "metadata": meta}
    return {
        "id": getattr(user, "id", None),
        "email": getattr(user, "email", None),
        "metadata": getattr(user, "user_metadata", None) or {},
    }

def get_current_user(request: Request) -> Dict[str, Any]:
    token = get_access_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Non authentifié")
    try:
        user = user_from_access_token(token)
    except Exception:
        logger.exception("auth.get_user failed")
        raise HTTPException(status_code=401, detail="Session expirée, veuillez vous connecter")
    if not user.get("id"):
        raise HTTPException(status_code=401, detail="Session expirée, veuillez vous connecter")
    user["token"] = token
    return user

def get_optional_user(request: Request) -> Optional[Dict[str, Any]]:
    """Variante tolérante: None si non authentifié (le flux de confirmation redirige vers le login)."""
    try:
        return get_current_user(request)
    except HTTPException:
        return None

def require_user(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    return user
