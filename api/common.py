"""Shared plumbing for the HTTP route handlers."""
import base64
import json
import logging
from functools import cached_property
from typing import Any, Dict, Optional

from api.settings import Settings
from security.encryption import PasswordCipher
from storage.dynamodb_manager import DynamoDBManager
from storage.identity_manager import IdentityManager
from storage.models import Profile
from transfer.ftp_manager import FTPManager

logger = logging.getLogger(__name__)

AUTH_REQUIRED = '認証が必要です'
ADMIN_REQUIRED = '管理者権限が必要です'
PROJECT_FORBIDDEN = 'このプロジェクトへのアクセス権がありません'
PROJECT_NOT_FOUND = 'プロジェクトが見つかりません'


class ApiError(Exception):
    """Error that maps directly to an HTTP response."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class Services:
    """Collaborators used by the handlers, created on first use."""

    def __init__(self, settings: Settings):
        self.settings = settings

    @cached_property
    def store(self) -> DynamoDBManager:
        return DynamoDBManager(
            projects_table=self.settings.projects_table,
            profiles_table=self.settings.profiles_table,
            assignments_table=self.settings.assignments_table
        )

    @cached_property
    def cipher(self) -> PasswordCipher:
        return PasswordCipher.from_env()

    @cached_property
    def ftp(self) -> FTPManager:
        return FTPManager(
            cipher=self.cipher,
            timeout=self.settings.ftp_timeout_seconds,
            verbose=self.settings.ftp_verbose
        )

    @cached_property
    def identity(self) -> IdentityManager:
        return IdentityManager(user_pool_id=self.settings.user_pool_id)


def json_response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    """Build an API Gateway proxy response with a JSON body."""
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json; charset=utf-8'},
        'body': json.dumps(body, ensure_ascii=False)
    }


def error_response(status_code: int, message: str) -> Dict[str, Any]:
    return json_response(status_code, {'error': message})


def parse_json_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Decode the JSON body of a request.

    Args:
        event: API Gateway proxy event

    Returns:
        Decoded body, {} when there is none

    Raises:
        ApiError: If the body is not a JSON object
    """
    body = event.get('body')
    if not body:
        return {}

    if event.get('isBase64Encoded'):
        body = base64.b64decode(body).decode('utf-8')

    try:
        data = json.loads(body)
    except ValueError as e:
        raise ApiError(400, 'リクエストの形式が正しくありません') from e

    if not isinstance(data, dict):
        raise ApiError(400, 'リクエストの形式が正しくありません')
    return data


def query_param(event: Dict[str, Any], name: str) -> Optional[str]:
    params = event.get('queryStringParameters') or {}
    return params.get(name) or None


def caller_id(event: Dict[str, Any]) -> str:
    """
    Return the authenticated caller's user id.

    The id is the ``sub`` claim placed in the request context by the API
    Gateway authorizer (REST and HTTP API shapes are both accepted).

    Raises:
        ApiError: 401 when the request carries no identity
    """
    authorizer = (event.get('requestContext') or {}).get('authorizer') or {}
    claims = authorizer.get('claims') or (authorizer.get('jwt') or {}).get('claims') or {}
    user_id = claims.get('sub')
    if not user_id:
        raise ApiError(401, AUTH_REQUIRED)
    return user_id


def require_admin(services: Services, event: Dict[str, Any]) -> Profile:
    """Return the caller's profile, or raise 401/403 unless they are an admin."""
    user_id = caller_id(event)
    profile = services.store.get_profile(user_id)
    if not profile or not profile.is_admin:
        raise ApiError(403, ADMIN_REQUIRED)
    return profile


def require_project_access(services: Services, user_id: str, project_id: str) -> None:
    """Allow assigned users and admins; raise 403 for everybody else."""
    if services.store.get_assignment(user_id, project_id):
        return

    profile = services.store.get_profile(user_id)
    if profile and profile.is_admin:
        return

    raise ApiError(403, PROJECT_FORBIDDEN)
