# conftest.py
"""
pytest 공용 픽스처

Firestore / Storage 대신 메모리 기반 대역(double)을 주입해
Firebase 프로젝트 없이 게시글 서비스와 라우트를 테스트합니다.
"""
import copy
from datetime import datetime, timezone

import pytest
from firebase_admin import firestore
from flask_jwt_extended import create_access_token
from google.api_core.exceptions import NotFound

from threads_backend import create_app
from threads_backend.api.posts.services import PostService
from threads_backend.services.user_directory import UserDirectory

TEST_JWT_SECRET = "threads-backend-test-secret-key-0123456789"


# =====================================================================================
# Firestore 대역
# =====================================================================================
class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data
        self.exists = data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeDocumentRef:
    def __init__(self, collection, doc_id):
        self._collection = collection
        self.id = doc_id

    def get(self):
        return FakeSnapshot(self.id, self._collection.docs.get(self.id))

    def set(self, data):
        self._collection.writes.append(('set', self.id, data))
        self._collection.docs[self.id] = copy.deepcopy(data)

    def update(self, changes):
        self._collection.writes.append(('update', self.id, changes))
        if self.id not in self._collection.docs:
            raise NotFound(f"No document to update: {self.id}")

        doc = self._collection.docs[self.id]
        for field_name, value in changes.items():
            if isinstance(value, firestore.ArrayUnion):
                current = list(doc.get(field_name) or [])
                for item in value.values:
                    if item not in current:
                        current.append(copy.deepcopy(item))
                doc[field_name] = current
            elif isinstance(value, firestore.ArrayRemove):
                doc[field_name] = [item for item in doc.get(field_name) or [] if item not in value.values]
            else:
                doc[field_name] = copy.deepcopy(value)

    def delete(self):
        self._collection.writes.append(('delete', self.id, None))
        self._collection.docs.pop(self.id, None)


class FakeQuery:
    # Firestore 'in' 연산자의 값 개수 제한
    IN_LIMIT = 30

    def __init__(self, collection, filters=(), orders=(), limit_count=None):
        self._collection = collection
        self._filters = filters
        self._orders = orders
        self._limit = limit_count

    def where(self, field_name, op, value):
        if op == 'in' and len(value) > self.IN_LIMIT:
            raise ValueError(f"'in' filters support a maximum of {self.IN_LIMIT} elements")
        return FakeQuery(self._collection, self._filters + ((field_name, op, value),), self._orders, self._limit)

    def order_by(self, field_name, direction=firestore.Query.ASCENDING):
        return FakeQuery(self._collection, self._filters, self._orders + ((field_name, direction),), self._limit)

    def limit(self, count):
        return FakeQuery(self._collection, self._filters, self._orders, count)

    @staticmethod
    def _matches(data, field_name, op, value):
        actual = data.get(field_name)
        if op == '==':
            return actual == value
        if op == 'in':
            return actual in value
        if op == 'array_contains':
            return value in (actual or [])
        raise NotImplementedError(op)

    def stream(self):
        self._collection.queries.append(self._filters)
        results = [
            FakeSnapshot(doc_id, data)
            for doc_id, data in self._collection.docs.items()
            if all(self._matches(data, f, op, v) for f, op, v in self._filters)
        ]
        for field_name, direction in reversed(self._orders):
            results.sort(key=lambda s: s._data.get(field_name), reverse=direction == firestore.Query.DESCENDING)
        if self._limit is not None:
            results = results[:self._limit]
        return iter(results)

    def get(self):
        return list(self.stream())


class FakeCollection(FakeQuery):
    def __init__(self, name):
        self.name = name
        self.docs = {}
        self.writes = []
        self.queries = []
        super().__init__(self)

    def document(self, doc_id):
        return FakeDocumentRef(self, doc_id)


class FakeFirestore:
    def __init__(self):
        self._collections = {}

    def collection(self, name):
        if name not in self._collections:
            self._collections[name] = FakeCollection(name)
        return self._collections[name]


# =====================================================================================
# Storage 대역
# =====================================================================================
class FakeImageStore:
    """업로드/삭제 호출을 기록하는 ImageStore 대역."""

    def __init__(self):
        self.uploads = []
        self.destroyed = []
        self.fail_upload = False
        self.fail_destroy = False

    def upload(self, payload):
        if not isinstance(payload, str) or not payload.startswith('data:image/'):
            raise ValueError("이미지는 base64 data URI 형식이어야 합니다.")
        if self.fail_upload:
            raise RuntimeError("storage unavailable")
        self.uploads.append(payload)
        return {"secure_url": f"https://storage.googleapis.com/test-bucket/posts/img{len(self.uploads)}.png"}

    def destroy(self, resource_key):
        if self.fail_destroy:
            raise RuntimeError("storage unavailable")
        self.destroyed.append(resource_key)


# =====================================================================================
# 데이터 헬퍼
# =====================================================================================
def add_user(db, user_id, username, following=(), profile_pic=None):
    db.collection('users').document(user_id).set({
        "user_id": user_id,
        "username": username,
        "profile_pic": profile_pic,
        "following": list(following),
    })


def add_post(db, post_id, posted_by, created_at, text="hello", img=None):
    db.collection('posts').document(post_id).set({
        "post_id": post_id,
        "posted_by": posted_by,
        "text": text,
        "img": img,
        "likes": [],
        "replies": [],
        "created_at": created_at,
        "updated_at": created_at,
    })


def at(hour):
    return datetime(2024, 1, 15, hour, 0, tzinfo=timezone.utc)


# =====================================================================================
# 픽스처
# =====================================================================================
@pytest.fixture
def db():
    fake_db = FakeFirestore()
    add_user(fake_db, "u1", "alice", following=["u2", "u3"])
    add_user(fake_db, "u2", "bob", following=[])
    add_user(fake_db, "u3", "carol", following=["u1"], profile_pic="https://cdn.example.com/carol.png")
    return fake_db


@pytest.fixture
def image_store():
    return FakeImageStore()


@pytest.fixture
def user_directory(db):
    return UserDirectory(db=db)


@pytest.fixture
def post_service(db, user_directory, image_store):
    return PostService(user_directory=user_directory, image_store=image_store, db=db)


@pytest.fixture
def app(user_directory, post_service, image_store):
    application = create_app('testing', services={
        'users': user_directory,
        'posts': post_service,
        'images': image_store,
    })
    application.config['JWT_SECRET_KEY'] = TEST_JWT_SECRET
    return application


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    def _headers(user_id):
        with app.app_context():
            token = create_access_token(identity=user_id)
        return {"Authorization": f"Bearer {token}"}
    return _headers
