"""Administrator handlers for projects, assignments and user accounts."""
import logging
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError

from api.common import (
    PROJECT_NOT_FOUND,
    ApiError,
    Services,
    json_response,
    parse_json_body,
    query_param,
    require_admin,
)
from storage.identity_manager import IdentityUser, UserExistsError
from storage.models import ADMIN_ROLE, DEFAULT_FTP_PATH, DEFAULT_FTP_PORT, USER_ROLE

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MISSING = '必須項目を入力してください'


def _port(value: Any) -> Optional[int]:
    if value in (None, ''):
        return None
    try:
        port = int(value)
    except (TypeError, ValueError) as e:
        raise ApiError(400, 'ポート番号が正しくありません') from e
    if not 0 < port < 65536:
        raise ApiError(400, 'ポート番号が正しくありません')
    return port


def _target_files(value: Any) -> List[str]:
    """Accept a list or a newline separated string; drop blank entries."""
    if not value:
        return []
    if isinstance(value, str):
        value = value.splitlines()
    return [str(f).strip() for f in value if str(f).strip()]


# Projects

def create_project(event: Dict[str, Any], services: Services) -> Dict[str, Any]:
    """POST /api/admin/projects"""
    data = parse_json_body(event)
    if not all(data.get(key) for key in ('name', 'ftp_host', 'ftp_user', 'ftp_password')):
        raise ApiError(400, REQUIRED_FIELDS_MISSING)

    require_admin(services, event)

    project = services.store.create_project(
        name=data['name'],
        ftp_host=data['ftp_host'],
        ftp_user=data['ftp_user'],
        ftp_password_encrypted=services.cipher.encrypt(data['ftp_password']),
        ftp_port=_port(data.get('ftp_port')),
        ftp_path=data.get('ftp_path') or None,
        target_files=_target_files(data.get('target_files')),
        public_url=data.get('public_url') or None
    )
    return json_response(200, {'success': True, 'project': project.to_public_dict()})


def update_project(event: Dict[str, Any], services: Services) -> Dict[str, Any]:
    """
    PUT /api/admin/projects

    The stored password is only replaced when a new one is supplied.
    """
    data = parse_json_body(event)
    if not all(data.get(key) for key in ('id', 'name', 'ftp_host', 'ftp_user')):
        raise ApiError(400, REQUIRED_FIELDS_MISSING)

    require_admin(services, event)

    changes = {
        'name': data['name'],
        'ftp_host': data['ftp_host'],
        'ftp_user': data['ftp_user'],
        'ftp_port': _port(data.get('ftp_port')) or DEFAULT_FTP_PORT,
        'ftp_path': data.get('ftp_path') or DEFAULT_FTP_PATH,
        'public_url': data.get('public_url') or None,
        'target_files': _target_files(data.get('target_files'))
    }
    if data.get('ftp_password'):
        changes['ftp_password_encrypted'] = services.cipher.encrypt(data['ftp_password'])

    project = services.store.update_project(data['id'], **changes)
    if not project:
        raise ApiError(404, PROJECT_NOT_FOUND)

    return json_response(200, {'success': True, 'project': project.to_public_dict()})


def delete_project(event: Dict[str, Any], services: Services) -> Dict[str, Any]:
    """DELETE /api/admin/projects?id=..."""
    project_id = query_param(event, 'id')
    if not project_id:
        raise ApiError(400, 'プロジェクトIDは必須です')

    require_admin(services, event)
    services.store.delete_project(project_id)
    return json_response(200, {'success': True})


# Assignments

def list_assignments(event: Dict[str, Any], services: Services) -> Dict[str, Any]:
    """GET /api/admin/projects/assign?project_id=...&user_id=..."""
    require_admin(services, event)
    assignments = services.store.list_assignments(
        user_id=query_param(event, 'user_id'),
        project_id=query_param(event, 'project_id')
    )
    return json_response(200, {'assignments': [a.to_dict() for a in assignments]})


def assign_user(event: Dict[str, Any], services: Services) -> Dict[str, Any]:
    """POST /api/admin/projects/assign"""
    data = parse_json_body(event)
    project_id = data.get('project_id')
    user_id = data.get('user_id')
    if not project_id or not user_id:
        raise ApiError(400, 'プロジェクトIDとユーザーIDは必須です')

    require_admin(services, event)

    if services.store.get_assignment(user_id, project_id):
        raise ApiError(400, 'すでに割り当て済みです')

    assignment = services.store.create_assignment(user_id, project_id)
    return json_response(200, {'success': True, 'assignment': assignment.to_dict()})


def unassign_user(event: Dict[str, Any], services: Services) -> Dict[str, Any]:
    """DELETE /api/admin/projects/assign?id=..."""
    assignment_id = query_param(event, 'id')
    if not assignment_id:
        raise ApiError(400, '割り当てIDは必須です')

    require_admin(services, event)
    services.store.delete_assignment(assignment_id)
    return json_response(200, {'success': True})


# Users

def list_users(event: Dict[str, Any], services: Services) -> Dict[str, Any]:
    """GET /api/admin/users"""
    require_admin(services, event)
    return json_response(200, {'users': [p.to_dict() for p in services.store.list_profiles()]})


def create_user(event: Dict[str, Any], services: Services) -> Dict[str, Any]:
    """
    POST /api/admin/users

    An account that exists in the user pool without a profile (left behind
    by an earlier failed creation) is recovered: its password is reset and
    the missing profile is created.
    """
    data = parse_json_body(event)
    email = (data.get('email') or '').strip().lower()
    password = data.get('password')
    role = data.get('role') or USER_ROLE

    if not email or not password:
        raise ApiError(400, 'メールアドレスとパスワードは必須です')
    if role not in (ADMIN_ROLE, USER_ROLE):
        raise ApiError(400, 'ロールが正しくありません')

    require_admin(services, event)

    try:
        user = services.identity.create_user(email, password)
    except UserExistsError:
        user = _recover_user(services, email, password)
    except ClientError as e:
        raise _creation_error(email, e) from e

    profile = services.store.create_profile(user.user_id, email, role)
    return json_response(200, {'success': True, 'user': profile.to_dict()})


def _recover_user(services: Services, email: str, password: str) -> IdentityUser:
    """Reuse a pool account that has no profile yet; reject real duplicates."""
    user = services.identity.find_user_by_email(email)
    if not user:
        raise ApiError(400, 'ユーザー作成エラー: アカウントを特定できませんでした')
    if services.store.get_profile(user.user_id):
        raise ApiError(400, 'このメールアドレスは既に使用されています')

    logger.warning(f"Recovering account without profile: {user.user_id}")
    try:
        services.identity.set_password(email, password)
    except ClientError as e:
        raise _creation_error(email, e) from e
    return user


def _creation_error(email: str, e: ClientError) -> ApiError:
    logger.error(f"Error creating user {email}: {e}", exc_info=True)
    message = e.response.get('Error', {}).get('Message', str(e))
    return ApiError(400, f"ユーザー作成エラー: {message}")


def delete_user(event: Dict[str, Any], services: Services) -> Dict[str, Any]:
    """DELETE /api/admin/users?id=..."""
    user_id = query_param(event, 'id')
    if not user_id:
        raise ApiError(400, 'ユーザーIDは必須です')

    admin = require_admin(services, event)
    if user_id == admin.id:
        raise ApiError(400, '自分自身は削除できません')

    profile = services.store.get_profile(user_id)
    if not profile:
        raise ApiError(404, 'ユーザーが見つかりません')

    services.store.delete_profile(user_id)
    services.store.delete_assignments(user_id=user_id)
    services.identity.delete_user(profile.email)
    return json_response(200, {'success': True})
