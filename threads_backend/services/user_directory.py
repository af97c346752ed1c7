# threads_backend/services/user_directory.py
import logging
from typing import Optional
from firebase_admin import firestore

from threads_backend.models.user import User

class UserDirectory:
    """
    Firestore 'users' 컬렉션에서 사용자를 조회하는 읽기 전용 서비스.
    게시글 작성자 확인, 피드 구성(following), 답글 스냅샷에 사용됩니다.
    """
    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.users_ref = self.db.collection('users')

    def find_by_id(self, user_id: str) -> Optional[User]:
        """사용자 ID로 조회합니다. 없으면 None."""
        if not user_id:
            return None
        doc = self.users_ref.document(str(user_id)).get()
        if not doc.exists:
            return None
        return User.from_dict(doc.to_dict(), user_id=doc.id)

    def find_by_username(self, username: str) -> Optional[User]:
        """username(핸들)으로 조회합니다. 없으면 None."""
        if not username:
            return None
        query = self.users_ref.where('username', '==', username).limit(1).stream()
        user_doc = next(query, None)
        if user_doc is None:
            logging.info(f"username으로 사용자를 찾지 못함: {username}")
            return None
        return User.from_dict(user_doc.to_dict(), user_id=user_doc.id)
