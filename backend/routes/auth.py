# backend/routes/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status, Request
from sqlalchemy.orm import Session
from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import create_access_token, get_current_user, revoke_tokens
from utils.audit import write_log, client_ip
from utils.rate_limit import auth_limit
from models.users import User
from schemas import user as schemas
from database import get_db

router = APIRouter(tags=["Auth"])
logger = logging.getLogger(__name__)

# Register a new user and hand out the first token
@router.post("/register", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED)
@auth_limit
def register(request: Request, user: schemas.UserCreate, db: Session = Depends(get_db)):
    # Check for existing user (emails are stored lower-cased)
    db_user = db.query(User).filter(User.email == user.email).first()
    if db_user:
        write_log(
            db,
            user_id=None,
            action="REGISTER",
            resource="auth",
            status="FAIL",
            ip=client_ip(request),
            meta={"email": user.email, "reason": "Email exists"},
        )
        raise HTTPException(status_code=422, detail="The email has already been taken.")

    # Create new user instance with hashed password
    new_user = User(name=user.name, email=user.email, password_hash=get_password_hash(user.password))
    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    # Log successful registration event
    write_log(
        db,
        user_id=new_user.id,
        action="REGISTER",
        resource="auth",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"email": new_user.email},
    )
    logger.info("Registered user %s", new_user.id)

    return {"access_token": create_access_token(new_user), "token_type": "bearer", "user": schemas.UserResponse.model_validate(new_user)}


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.AuthResponse)
@auth_limit
def login(request: Request, payload: schemas.UserLogin, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(User.email == payload.email).first()

    # Validate credentials and log failure on error
    if not db_user or not verify_password(payload.password, db_user.password_hash):
        write_log(db, user_id=(db_user.id if db_user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"email": payload.email})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    access_token = create_access_token(db_user)

    # Log successful login event
    write_log(db, user_id=db_user.id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"email": db_user.email})

    return {"access_token": access_token, "token_type": "bearer", "user": schemas.UserResponse.model_validate(db_user)}


# Revoke every token of the current user
@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
@auth_limit
def logout(request: Request, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    revoke_tokens(db, current_user)
    write_log(db, user_id=current_user.id, action="LOGOUT", resource="auth",
              status="SUCCESS", ip=client_ip(request))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Retrieve current authenticated user details
@router.get("/user", response_model=schemas.UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
