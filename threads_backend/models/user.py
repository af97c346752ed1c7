# threads_backend/models/user.py
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

@dataclass
class User:
    """
    Firestore 'users' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    게시글 서비스는 이 컬렉션을 읽기만 합니다.
    """
    user_id: str
    username: str
    profile_pic: Optional[str] = None
    following: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], user_id: Optional[str] = None) -> "User":
        """Firestore 문서 딕셔너리로부터 User를 생성합니다. 알 수 없는 필드는 무시합니다."""
        return cls(
            user_id=data.get('user_id') or user_id,
            username=data.get('username'),
            profile_pic=data.get('profile_pic'),
            following=list(data.get('following') or [])
        )
