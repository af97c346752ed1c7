# threads_backend/core/exceptions.py
"""
서비스 계층에서 발생시키는 도메인 예외.

입력값 오류는 marshmallow의 ValidationError를 그대로 사용하고,
나머지는 아래 ServiceError 계열로 표현합니다.
라우트는 각 예외의 status_code / error_code로 응답을 구성합니다.
"""
from typing import Optional


class ServiceError(Exception):
    status_code = 500
    error_code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code

    def to_dict(self) -> dict:
        return {"error_code": self.error_code, "message": self.message}


class NotFoundError(ServiceError):
    """참조한 게시글 또는 사용자가 존재하지 않는 경우."""
    status_code = 404
    error_code = "RESOURCE_NOT_FOUND"


class AuthorizationError(ServiceError):
    """요청자가 리소스의 소유자가 아닌 경우."""
    status_code = 401
    error_code = "UNAUTHORIZED"


class UnexpectedError(ServiceError):
    """Firestore, Storage 등 외부 협력자 호출이 실패한 경우."""
    status_code = 500
    error_code = "INTERNAL_SERVER_ERROR"
