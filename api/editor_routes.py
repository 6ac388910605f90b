"""Handlers behind the dashboard and the structured editor."""
import logging
from typing import Any, Dict, List

from api.common import (
    PROJECT_NOT_FOUND,
    ApiError,
    Services,
    caller_id,
    json_response,
    parse_json_body,
    require_project_access,
)
from editor.models import EventItem, ScheduleItem
from editor.preview import preview_warning, render_preview
from editor.session import EditorSession

logger = logging.getLogger(__name__)


def list_projects(event: Dict[str, Any], services: Services) -> Dict[str, Any]:
    """GET /api/projects: list the projects assigned to the caller, all of them for admins."""
    user_id = caller_id(event)
    profile = services.store.get_profile(user_id)

    if profile and profile.is_admin:
        projects = services.store.list_projects()
    else:
        assigned = {a.project_id for a in services.store.list_assignments(user_id=user_id)}
        projects = [p for p in services.store.list_projects() if p.id in assigned]

    return json_response(200, {'projects': [p.to_public_dict() for p in projects]})


def _document(data: Dict[str, Any]) -> str:
    content = data.get('content')
    if not isinstance(content, str):
        raise ApiError(400, 'コンテンツは必須です')
    return content


def _records(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    records = data.get(key)
    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise ApiError(400, f"{key} の形式が正しくありません")
    return records


def parse_document(event: Dict[str, Any], services: Services) -> Dict[str, Any]:
    """
    POST /api/editor/parse: seed the structured editor from a page.

    Body: {"content": ..., "file_path": ...?}
    """
    caller_id(event)
    data = parse_json_body(event)

    session = EditorSession(_document(data), data.get('file_path'))
    session.switch_to_visual()

    return json_response(200, {
        'events': [e.to_dict() for e in session.events],
        'schedule': [s.to_dict() for s in session.schedule]
    })


def generate_document(event: Dict[str, Any], services: Services) -> Dict[str, Any]:
    """
    POST /api/editor/generate: re-render the editable regions of a page.

    Body: {"content": ..., "events": [...]?, "schedule": [...]?}
    Only the lists present in the body are regenerated.
    """
    caller_id(event)
    data = parse_json_body(event)

    session = EditorSession(_document(data), data.get('file_path'))
    session.switch_to_visual()

    try:
        if 'events' in data:
            session.set_events([EventItem.from_dict(r) for r in _records(data, 'events')])
        if 'schedule' in data:
            session.set_schedule([ScheduleItem.from_dict(r) for r in _records(data, 'schedule')])
    except ValueError as e:
        raise ApiError(400, f"レコードの形式が正しくありません: {e}") from e

    return json_response(200, {'content': session.content, 'changed': session.has_changes})


def preview_document(event: Dict[str, Any], services: Services) -> Dict[str, Any]:
    """
    POST /api/editor/preview: page text ready for the preview frame.

    Body: {"project_id": ..., "content": ...}
    """
    data = parse_json_body(event)
    project_id = data.get('project_id')
    if not project_id:
        raise ApiError(400, 'プロジェクトIDは必須です')
    content = _document(data)

    require_project_access(services, caller_id(event), project_id)
    project = services.store.get_project(project_id)
    if not project:
        raise ApiError(404, PROJECT_NOT_FOUND)

    return json_response(200, {
        'html': render_preview(project, content),
        'warning': preview_warning(project)
    })
