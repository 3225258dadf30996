# regionhub/utils/hashing.py
from passlib.context import CryptContext

# Salted PBKDF2; every hash carries its own salt and round count
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)
