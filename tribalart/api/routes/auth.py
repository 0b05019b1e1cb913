# tribalart/api/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm

from tribalart.api.deps import get_db, get_session, raise_for_outcome, require_session
from tribalart.api.schemas.user import (
    MessageOut,
    ResetPasswordConfirm,
    ResetPasswordRequest,
    SignInRequest,
    SignUpRequest,
    TokenResponse,
    UserOut,
)
from tribalart.database import FileBackedDB
from tribalart.services.auth_session import AuthSession

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _token_response(response: Response, session: AuthSession) -> dict:
    # cookie for browser flows, body for API clients
    response.set_cookie(key="access_token", value=session.access_token, httponly=True, samesite="lax")
    return {"access_token": session.access_token, "token_type": "bearer", "user": session.user.mask_secret()}


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def signup(payload: SignUpRequest, response: Response, db: FileBackedDB = Depends(get_db)):
    """
    Create an account (full_name is stored as sign-up metadata) and sign it in.
    """
    session = AuthSession(db=db)
    raise_for_outcome(session.sign_up(payload.email, payload.password, payload.full_name))
    return _token_response(response, session)


@router.post("/signin", response_model=TokenResponse)
def signin(payload: SignInRequest, response: Response, db: FileBackedDB = Depends(get_db)):
    session = AuthSession(db=db)
    raise_for_outcome(session.sign_in(payload.email, payload.password))
    return _token_response(response, session)


@router.post("/token", response_model=TokenResponse)
def token(response: Response, form_data: OAuth2PasswordRequestForm = Depends(), db: FileBackedDB = Depends(get_db)):
    """
    Token endpoint used by OAuth2PasswordRequestForm clients (username = email).
    """
    session = AuthSession(db=db)
    outcome = session.sign_in(form_data.username, form_data.password)
    if not outcome.ok:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=outcome.message)
    return _token_response(response, session)


@router.post("/signout", response_model=MessageOut)
def signout(response: Response, session: AuthSession = Depends(get_session)):
    outcome = session.sign_out()
    response.delete_cookie("access_token")
    return {"ok": True, "message": outcome.message}


@router.post("/reset-password", response_model=MessageOut)
def reset_password(payload: ResetPasswordRequest, db: FileBackedDB = Depends(get_db)):
    outcome = raise_for_outcome(AuthSession(db=db).reset_password(payload.email))
    return {"ok": True, "message": outcome.message}


@router.post("/reset-password/confirm", response_model=MessageOut)
def confirm_reset_password(payload: ResetPasswordConfirm, db: FileBackedDB = Depends(get_db)):
    outcome = raise_for_outcome(AuthSession(db=db).complete_password_reset(payload.token, payload.password))
    return {"ok": True, "message": outcome.message}


@router.get("/me", response_model=UserOut)
def me(session: AuthSession = Depends(require_session)):
    return session.user.mask_secret()
