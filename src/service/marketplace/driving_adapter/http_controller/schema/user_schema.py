"""
User API Schemas - Pydantic models for request/response
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, SecretStr

from src.service.marketplace.domain.entity.user_entity import UserRole


class CreateUserRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'email': 'installer@example.com',
                'password': 'P@ssw0rd',
                'name': 'Sunny Installs',
                'role': 'seller',
            }
        }
    )

    email: EmailStr
    password: SecretStr = Field(
        ...,
        min_length=8,
        max_length=72,
        description='Password must be 8-72 characters (bcrypt limit)',
    )
    name: str = Field(..., min_length=1, max_length=100)
    # Validated against the self-registrable roles in the use case
    role: str = UserRole.BUYER.value


class LoginRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={'example': {'email': 'buyer@voltbay.dev', 'password': 'P@ssw0rd'}}
    )

    email: EmailStr
    password: SecretStr = Field(..., min_length=1, max_length=72)


class UserResponse(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            'example': {
                'id': 1,
                'email': 'buyer@voltbay.dev',
                'name': 'Solar Buyer',
                'role': 'buyer',
                'is_active': True,
                'is_verified': False,
            }
        },
    )

    id: int
    email: str
    name: str
    role: UserRole
    is_active: bool
    is_verified: bool = False
    created_at: Optional[datetime] = None
