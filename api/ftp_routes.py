"""Handlers that read and write project files over FTP."""
import ftplib
import logging
import re
from typing import Any, Dict

from api.common import (
    PROJECT_NOT_FOUND,
    ApiError,
    Services,
    caller_id,
    json_response,
    parse_json_body,
    require_project_access,
)
from security.encryption import EncryptionError
from storage.models import Project
from transfer.ftp_manager import FTPConfig

logger = logging.getLogger(__name__)

NON_ASCII = re.compile(r'[^\x00-\x7F]')

NON_ASCII_PATH_HINT = (
    ' (ヒント: 日本語のフォルダ名やファイル名が含まれているため、サーバーが認識できない'
    '可能性があります。フォルダ名を半角英数字に変更してみてください)'
)


def _load_project(services: Services, event: Dict[str, Any], project_id: str) -> Project:
    user_id = caller_id(event)
    require_project_access(services, user_id, project_id)

    project = services.store.get_project(project_id)
    if not project:
        raise ApiError(404, PROJECT_NOT_FOUND)
    return project


def read_file(event: Dict[str, Any], services: Services) -> Dict[str, Any]:
    """
    POST /api/ftp/read: return the content of one project file.

    Body: {"project_id": ..., "file_path": ...}
    """
    data = parse_json_body(event)
    project_id = data.get('project_id')
    file_path = data.get('file_path') or ''

    if not project_id or not file_path:
        raise ApiError(400, 'プロジェクトIDとファイルパスは必須です')

    project = _load_project(services, event, project_id)

    try:
        content = services.ftp.read_file(FTPConfig.from_project(project), file_path)
    except (ftplib.all_errors + (EncryptionError, UnicodeDecodeError)) as e:
        logger.error(
            f"Error reading FTP file {file_path}: {e}",
            extra={'project_id': project_id, 'error_type': type(e).__name__},
            exc_info=True
        )
        message = f"ファイル読み込み失敗: {e or '不明なエラー'}"
        if '550' in str(e) and NON_ASCII.search(file_path):
            message += NON_ASCII_PATH_HINT
        raise ApiError(500, message) from e

    return json_response(200, {'success': True, 'content': content})


def write_file(event: Dict[str, Any], services: Services) -> Dict[str, Any]:
    """
    POST /api/ftp/write: replace one project file.

    Body: {"project_id": ..., "file_path": ..., "content": ...}
    """
    data = parse_json_body(event)
    project_id = data.get('project_id')
    file_path = data.get('file_path')
    content = data.get('content')

    if not project_id or not file_path or not isinstance(content, str):
        raise ApiError(400, 'プロジェクトID、ファイルパス、コンテンツは必須です')

    project = _load_project(services, event, project_id)

    try:
        services.ftp.write_file(FTPConfig.from_project(project), file_path, content)
    except (ftplib.all_errors + (EncryptionError,)) as e:
        logger.error(
            f"Error writing FTP file {file_path}: {e}",
            extra={'project_id': project_id, 'error_type': type(e).__name__},
            exc_info=True
        )
        raise ApiError(500, 'ファイル保存中にエラーが発生しました') from e

    return json_response(200, {'success': True})
