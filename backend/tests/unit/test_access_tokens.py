import time
from uuid import uuid4

import pytest
from fastapi import HTTPException

from civichub.infra import jwt as jwt_helper
from civichub.infra.auth import get_current_user, verify_access_jwt


def test_verify_access_jwt_reads_identity_claims():
	user_id = str(uuid4())
	token = jwt_helper.encode_access(user_id, email="ada@example.com", name="ada", sid="s-1")

	user = verify_access_jwt(token)

	assert user.id == user_id
	assert (user.email, user.display_name, user.session_id) == ("ada@example.com", "ada", "s-1")


def test_expired_token_is_unauthorized():
	token = jwt_helper.encode_access(str(uuid4()), ttl_seconds=60, now=int(time.time()) - 3600)

	with pytest.raises(HTTPException) as excinfo:
		verify_access_jwt(token)

	assert excinfo.value.status_code == 401


def test_subject_must_be_uuid():
	with pytest.raises(HTTPException) as excinfo:
		verify_access_jwt(jwt_helper.encode_access("not-a-uuid"))

	assert excinfo.value.detail == "unauthorized"


@pytest.mark.asyncio
async def test_dev_header_only_accepted_in_dev(monkeypatch):
	from civichub.settings import settings

	user_id = str(uuid4())
	assert (await get_current_user(x_user_id=user_id, credentials=None)).id == user_id

	monkeypatch.setattr(settings, "environment", "production")
	with pytest.raises(HTTPException) as excinfo:
		await get_current_user(x_user_id=user_id, credentials=None)
	assert excinfo.value.status_code == 401
