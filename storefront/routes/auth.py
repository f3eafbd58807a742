# storefront/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status, Request, Response
from sqlalchemy.orm import Session
from sqlalchemy import func

from storefront.database import get_db
from storefront.models.users import Profile, ManagedUser
from storefront.schemas import user as schemas
from storefront.utils.hashing import get_password_hash, verify_password
from storefront.utils.tokenJWT import (
    create_access_token, get_current_user, SESSION_COOKIE, ACCESS_TOKEN_EXPIRE_MINUTES,
)
from storefront.utils.audit import write_log, client_ip

router = APIRouter(tags=["Auth"])

# Register a new shopper account
@router.post("/register", response_model=schemas.ProfileResponse, status_code=status.HTTP_201_CREATED)
def register(user: schemas.UserCreate, request: Request, db: Session = Depends(get_db)):
    # Normalize email input
    normalized_email = user.email.strip().lower()

    # Check for existing user
    existing = db.query(Profile).filter(func.lower(Profile.email) == normalized_email).first()
    if existing:
        write_log(
            db,
            user_id=None,
            action="REGISTER",
            resource="auth",
            status="FAIL",
            ip=client_ip(request),
            meta={"email": normalized_email, "reason": "Email exists"},
        )
        raise HTTPException(status_code=400, detail="Email already registered")

    # Profile and its admin directory entry share the same id
    profile = Profile(
        email=normalized_email,
        password_hash=get_password_hash(user.password),
        full_name=user.full_name,
        role="normal",
    )
    db.add(profile)
    db.flush()
    db.add(ManagedUser(id=profile.id, full_name=profile.full_name, email=profile.email, status="active"))
    db.commit()
    db.refresh(profile)

    write_log(
        db,
        user_id=profile.id,
        action="REGISTER",
        resource="auth",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"email": profile.email},
    )
    return profile


# Authenticate user and issue a session token
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, request: Request, response: Response, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    db_user = db.query(Profile).filter(Profile.email == email).first()

    # Validate credentials and log failure on error
    if not db_user or not verify_password(payload.password, db_user.password_hash):
        write_log(db, user_id=(db_user.id if db_user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"email": email})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    access_token = create_access_token(data={"sub": db_user.email, "role": db_user.role})
    response.set_cookie(
        SESSION_COOKIE, access_token,
        httponly=True, samesite="lax", max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )

    write_log(db, user_id=db_user.id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"email": db_user.email})

    return {"access_token": access_token, "token_type": "bearer"}


# End the browser session; persisted cart rows stay for the next login
@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE)
    return {"detail": "Signed out"}


# Retrieve current authenticated profile
@router.get("/me", response_model=schemas.ProfileResponse)
def me(current_user: Profile = Depends(get_current_user)):
    return current_user


# Form descriptions for the login/register pages; redirects land here
@router.get("/login")
def login_page():
    return {"detail": "Sign in required", "submit": "POST /login", "fields": ["email", "password"]}


@router.get("/register")
def register_page():
    return {"submit": "POST /register", "fields": ["email", "password", "full_name"]}
