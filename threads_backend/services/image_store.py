# threads_backend/services/image_store.py
import base64
import binascii
import logging
import mimetypes
import re
import uuid
from typing import Dict
from flask import Flask
from firebase_admin import storage

# data:image/png;base64,xxxx
DATA_URI_PATTERN = re.compile(r'^data:(?P<content_type>image/[\w.+-]+);base64,(?P<data>.+)$', re.DOTALL)


def derive_resource_key(url: str) -> str:
    """
    이미지 URL에서 Storage 리소스 키를 추출합니다.
    마지막 경로 조각에서 쿼리 문자열과 확장자를 제거한 값입니다.

    예) https://storage.googleapis.com/bucket/posts/abc123.png -> abc123
    """
    last_segment = url.split("?")[0].rstrip("/").split("/")[-1]
    return last_segment.split(".")[0]


class ImageStore:
    """
    Firebase Storage에 게시글 이미지를 올리고 지우는 서비스 클래스.
    클라이언트가 보낸 base64 data URI를 업로드하여 공개 URL을 돌려줍니다.
    """

    def __init__(self):
        """실제 버킷 객체는 init_app 메서드를 통해 주입됩니다."""
        self.bucket = None
        self.folder = 'posts'

    def init_app(self, app: Flask):
        """
        Flask 앱 초기화 과정에서 호출되어 Storage 버킷을 설정합니다.

        :param app: Flask 애플리케이션 객체
        """
        bucket_name = app.config.get('FIREBASE_STORAGE_BUCKET')
        if not bucket_name:
            raise ValueError("FIREBASE_STORAGE_BUCKET 설정이 .env 또는 설정 파일에 필요합니다.")

        self.bucket = storage.bucket(bucket_name)
        self.folder = app.config.get('POST_IMAGE_FOLDER', self.folder)
        logging.info("ImageStore: Firebase Storage 서비스가 성공적으로 초기화되었습니다.")

    def _require_bucket(self):
        if not self.bucket:
            raise RuntimeError("ImageStore가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")

    def upload(self, payload: str) -> Dict[str, str]:
        """
        base64 data URI 이미지를 업로드하고 공개 URL을 반환합니다.

        :param payload: 'data:image/<type>;base64,<data>' 형식의 문자열
        :return: {"secure_url": 공개 URL}
        :raises ValueError: payload 형식이 잘못된 경우
        """
        self._require_bucket()

        match = DATA_URI_PATTERN.match(payload.strip()) if isinstance(payload, str) else None
        if not match:
            raise ValueError("이미지는 base64 data URI 형식이어야 합니다.")

        content_type = match.group('content_type')
        try:
            data = base64.b64decode(match.group('data'), validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("이미지 데이터를 base64로 해석할 수 없습니다.")

        extension = mimetypes.guess_extension(content_type) or ''
        destination_blob_name = f"{self.folder}/{uuid.uuid4().hex}{extension}"

        blob = self.bucket.blob(destination_blob_name)
        try:
            blob.upload_from_string(data, content_type=content_type)
            blob.make_public()
        except Exception as e:
            logging.error(f"이미지 업로드 실패 ({destination_blob_name}): {e}", exc_info=True)
            raise

        logging.info(f"이미지 업로드 완료: {destination_blob_name}")
        return {"secure_url": blob.public_url}

    def destroy(self, resource_key: str) -> None:
        """
        리소스 키에 해당하는 이미지(확장자 무관)를 삭제합니다.

        :param resource_key: derive_resource_key()로 얻은 키
        """
        self._require_bucket()
        if not resource_key:
            return

        prefix = f"{self.folder}/{resource_key}"
        for blob in self.bucket.list_blobs(prefix=prefix):
            stem = blob.name.split("/")[-1].split(".")[0]
            if stem == resource_key:
                blob.delete()
                logging.info(f"이미지 삭제 완료: {blob.name}")
