"""
Stateless JWT authentication

The token carries everything needed to rebuild the caller's UserEntity, so
authenticated requests do not touch the database.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from fastapi import HTTPException, status
import jwt
from pydantic import SecretStr

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import LoginError
from src.service.marketplace.app.interface.i_password_hasher import IPasswordHasher
from src.service.marketplace.app.interface.i_user_repo import IUserRepo
from src.service.marketplace.domain.entity.user_entity import UserEntity, UserRole


class JwtAuth:
    def __init__(self) -> None:
        self.secret = settings.SECRET_KEY.get_secret_value()
        self.algorithm = settings.ALGORITHM
        self.token_expire_days = settings.ACCESS_TOKEN_EXPIRE_DAYS

    def create_jwt_token(self, user_entity: UserEntity) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            'sub': str(user_entity.id),
            'exp': now + timedelta(days=self.token_expire_days),
            'iat': now,
            'user_id': user_entity.id,
            'email': user_entity.email,
            'name': user_entity.name,
            'role': user_entity.role.value,
            'is_active': user_entity.is_active,
            'is_verified': user_entity.is_verified,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_jwt_token(self, token: str) -> Dict:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid token')

    async def authenticate_user(
        self,
        *,
        user_repo: IUserRepo,
        password_hasher: IPasswordHasher,
        email: str,
        password: str,
    ) -> UserEntity:
        user_entity = UserEntity.validate_user_exists(
            await user_repo.get_by_email(email=email.strip().lower())
        )
        if not password_hasher.verify_password(
            plain_password=SecretStr(password), hashed_password=user_entity.hashed_password
        ):
            raise LoginError('LOGIN_BAD_CREDENTIALS')
        user_entity.validate_active()
        return user_entity

    def get_current_user_info_from_jwt(self, token: Optional[str]) -> UserEntity:
        if not token:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED, detail='Not authenticated'
            )

        payload = self.decode_jwt_token(token)

        user_id = payload.get('user_id')
        email = payload.get('email')
        name = payload.get('name')
        role = payload.get('role')
        is_active = payload.get('is_active')

        if not user_id or not email or not name or not role or is_active is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid token')
        if role not in {r.value for r in UserRole}:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid token')

        user_entity = UserEntity(
            id=user_id,
            email=email,
            name=name,
            role=UserRole(role),
            is_active=is_active,
            is_verified=bool(payload.get('is_verified', False)),
        )

        if not user_entity.is_active:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail='User is inactive')

        return user_entity
