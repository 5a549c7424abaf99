# greencredits/core/security.py
from passlib.context import CryptContext

pwd = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    # bcrypt hard limit: 72 BYTES
    if isinstance(password, str):
        password = password.encode("utf-8")
    password = password[:72]
    return pwd.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    if not hashed:
        return False
    if isinstance(password, str):
        password = password.encode("utf-8")
    password = password[:72]
    return pwd.verify(password, hashed)
