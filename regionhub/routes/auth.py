# regionhub/routes/auth.py
from fastapi import APIRouter, Depends, File, HTTPException, status, Request, UploadFile
from sqlalchemy.orm import Session
from sqlalchemy import func

from regionhub.database import get_db
from regionhub.models.users import User
from regionhub.schemas import user as schemas
from regionhub.utils.audit import write_log, client_ip
from regionhub.utils.errors import Conflict, NotFound, ValidationFailed
from regionhub.utils.hashing import get_password_hash, verify_password
from regionhub.utils.storage import delete_upload, save_upload
from regionhub.utils.tokenJWT import create_access_token, get_current_user

router = APIRouter(tags=["Auth"])

# Register a new customer, vendor or delivery account
@router.post("/register", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
def register(payload: schemas.UserCreate, request: Request, db: Session = Depends(get_db)):
    normalized_email = payload.email.strip().lower()

    existing = db.query(User).filter(func.lower(User.email) == normalized_email).first()
    if existing:
        write_log(db, user_id=None, action="REGISTER", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"email": normalized_email, "reason": "Email exists"})
        raise Conflict("Email already registered", {"email": "Email already registered"})

    new_user = User(
        email=normalized_email,
        password_hash=get_password_hash(payload.password),
        role=payload.role,
        name=payload.name.strip(),
        phone=payload.phone,
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    write_log(db, user_id=new_user.id, action="REGISTER", resource="auth", resource_id=new_user.id,
              ip=client_ip(request), meta={"email": new_user.email, "role": new_user.role})
    return new_user


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(func.lower(User.email) == payload.email.strip().lower()).first()

    if not db_user or not verify_password(payload.password, db_user.password_hash):
        write_log(db, user_id=(db_user.id if db_user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"email": payload.email})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    access_token = create_access_token(data={"sub": db_user.email, "role": db_user.role})
    write_log(db, user_id=db_user.id, action="LOGIN", resource="auth", ip=client_ip(request),
              meta={"email": db_user.email})
    return {"access_token": access_token, "token_type": "bearer", "role": db_user.role}


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("/me", response_model=schemas.UserResponse)
def update_me(
    payload: schemas.UserUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(current_user, field, value)
    db.commit()
    db.refresh(current_user)

    write_log(db, user_id=current_user.id, action="PROFILE_UPDATE", resource="users",
              resource_id=current_user.id, ip=client_ip(request), meta={"fields": sorted(changes)})
    return current_user


# Change password after verifying the current one
@router.post("/me/password")
def change_password(
    payload: schemas.PasswordChange,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not verify_password(payload.current_password, current_user.password_hash):
        write_log(db, user_id=current_user.id, action="PASSWORD_CHANGE", resource="auth",
                  status="FAIL", ip=client_ip(request))
        raise ValidationFailed("Invalid password", {"current_password": "Current password is incorrect"})

    current_user.password_hash = get_password_hash(payload.new_password)
    db.commit()

    write_log(db, user_id=current_user.id, action="PASSWORD_CHANGE", resource="auth", ip=client_ip(request))
    return {"message": "Password updated"}


# Replace the profile photo; the previous file is removed from storage
@router.put("/me/photo", response_model=schemas.UserResponse)
def upload_my_photo(
    request: Request,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    filename = save_upload(file, field="file")
    previous = current_user.photo
    current_user.photo = filename
    db.commit()
    db.refresh(current_user)
    delete_upload(previous)

    write_log(db, user_id=current_user.id, action="PHOTO_UPLOAD", resource="users",
              resource_id=current_user.id, ip=client_ip(request), meta={"photo": filename})
    return current_user


@router.delete("/me/photo", response_model=schemas.UserResponse)
def delete_my_photo(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not current_user.photo:
        raise NotFound("No profile photo")

    previous = current_user.photo
    current_user.photo = None
    db.commit()
    db.refresh(current_user)
    delete_upload(previous)

    write_log(db, user_id=current_user.id, action="PHOTO_DELETE", resource="users",
              resource_id=current_user.id, ip=client_ip(request))
    return current_user
