# ========= Copyright 2025-2026 @ Hanggent.AI All Rights Reserved. =========
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ========= Copyright 2025-2026 @ Hanggent.AI All Rights Reserved. =========


"""
Request authentication.

Tokens are issued by the external auth provider; this module only verifies
them and exposes the caller's user id to the routes.
"""

import logging

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.component.environment import get_config

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


class Auth:
    def __init__(self, id: str, expired_at: int | None = None):
        self.id = id
        self.expired_at = expired_at

    @classmethod
    def decode_token(cls, token: str) -> "Auth":
        """Verify *token* and return its subject.

        Raises ``jwt.InvalidTokenError`` (or a subclass) on any failure.
        """
        config = get_config().auth
        if not config.is_configured():
            raise jwt.InvalidTokenError("auth secret_key is not configured")
        payload = jwt.decode(token, config.secret_key, algorithms=[config.algorithm])
        subject = payload["id"] if "id" in payload else payload.get("sub")
        if subject is None or str(subject) == "":
            raise jwt.InvalidTokenError("token carries no user id")
        return cls(id=str(subject), expired_at=payload.get("exp"))


def auth_must(credentials: HTTPAuthorizationCredentials | None = Depends(_bearer)) -> Auth:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return Auth.decode_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
