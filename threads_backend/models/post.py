# threads_backend/models/post.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict, Any

from threads_backend.utils.datetime_utils import DateTimeUtils

@dataclass
class Reply:
    """
    Post 문서의 replies 배열에 저장되는 답글.
    작성 시점의 사용자 정보(username, user_profile_pic)를 스냅샷으로 보관하며,
    이후 프로필이 바뀌어도 갱신하지 않습니다.
    """
    reply_id: str
    user_id: str
    username: str
    text: str
    user_profile_pic: Optional[str] = None
    created_at: datetime = field(default_factory=DateTimeUtils.now)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Reply":
        processed_data = DateTimeUtils.from_firestore(data)
        return cls(
            reply_id=processed_data.get('reply_id'),
            user_id=processed_data.get('user_id'),
            username=processed_data.get('username'),
            text=processed_data.get('text'),
            user_profile_pic=processed_data.get('user_profile_pic'),
            created_at=processed_data.get('created_at')
        )

@dataclass
class Post:
    """
    Firestore 'posts' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    - likes: 좋아요를 누른 사용자 ID 목록 (중복 없음)
    - replies: 작성 순서대로 쌓이는 답글 목록
    """
    post_id: str
    posted_by: str
    text: str
    img: Optional[str] = None
    likes: List[str] = field(default_factory=list)
    replies: List[Reply] = field(default_factory=list)
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Post":
        """Firestore에서 읽은 딕셔너리로부터 Post를 생성합니다. Timestamp는 UTC datetime으로 변환됩니다."""
        processed_data = DateTimeUtils.from_firestore(data)
        return cls(
            post_id=processed_data.get('post_id'),
            posted_by=processed_data.get('posted_by'),
            text=processed_data.get('text'),
            img=processed_data.get('img'),
            likes=list(processed_data.get('likes') or []),
            replies=[Reply.from_dict(r) for r in processed_data.get('replies') or []],
            created_at=processed_data.get('created_at'),
            updated_at=processed_data.get('updated_at') or processed_data.get('created_at')
        )
