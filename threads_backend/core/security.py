# threads_backend/core/security.py
from typing import Optional, Any
from flask import current_app
from flask_jwt_extended import get_jwt_identity

from threads_backend.core.exceptions import AuthorizationError
from threads_backend.models.user import User


def is_owner(principal_id: Optional[Any], owner_id: Optional[Any]) -> bool:
    """요청자 ID와 리소스 소유자 ID가 같은지 확인합니다. 어느 한쪽이라도 비어 있으면 False."""
    if not principal_id or not owner_id:
        return False
    return str(principal_id) == str(owner_id)


def load_principal() -> User:
    """
    JWT identity를 UserDirectory에서 조회해 현재 요청자의 User를 반환합니다.
    @jwt_required()가 적용된 요청 안에서만 호출해야 합니다.
    """
    user_id = get_jwt_identity()
    user = current_app.services['users'].find_by_id(user_id)
    if user is None:
        raise AuthorizationError("인증된 사용자 정보를 찾을 수 없습니다.")
    return user
