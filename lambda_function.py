"""AWS Lambda handler for the site editor dashboard API."""
import json
import logging
import time
from typing import Any, Callable, Dict, Tuple

from api import admin_routes, editor_routes, ftp_routes
from api.common import ApiError, Services, error_response, json_response
from api.settings import load_settings


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


Handler = Callable[[Dict[str, Any], Services], Dict[str, Any]]

ROUTES: Dict[Tuple[str, str], Handler] = {
    ('POST', '/api/ftp/read'): ftp_routes.read_file,
    ('POST', '/api/ftp/write'): ftp_routes.write_file,
    ('GET', '/api/projects'): editor_routes.list_projects,
    ('POST', '/api/editor/parse'): editor_routes.parse_document,
    ('POST', '/api/editor/generate'): editor_routes.generate_document,
    ('POST', '/api/editor/preview'): editor_routes.preview_document,
    ('POST', '/api/admin/projects'): admin_routes.create_project,
    ('PUT', '/api/admin/projects'): admin_routes.update_project,
    ('DELETE', '/api/admin/projects'): admin_routes.delete_project,
    ('GET', '/api/admin/projects/assign'): admin_routes.list_assignments,
    ('POST', '/api/admin/projects/assign'): admin_routes.assign_user,
    ('DELETE', '/api/admin/projects/assign'): admin_routes.unassign_user,
    ('GET', '/api/admin/users'): admin_routes.list_users,
    ('POST', '/api/admin/users'): admin_routes.create_user,
    ('DELETE', '/api/admin/users'): admin_routes.delete_user,
}


def resolve_route(event: Dict[str, Any]) -> Tuple[str, str]:
    """Return (method, path) for REST (v1) and HTTP API (v2) proxy events."""
    http = (event.get('requestContext') or {}).get('http') or {}
    method = event.get('httpMethod') or http.get('method') or ''
    path = event.get('path') or event.get('rawPath') or http.get('path') or ''
    if len(path) > 1:
        path = path.rstrip('/')
    return method.upper(), path


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler function for the dashboard API.

    Args:
        event: API Gateway proxy event
        context: Lambda context object

    Returns:
        API Gateway proxy response with a JSON body
    """
    settings = load_settings()
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    start_time = time.time()
    method, path = resolve_route(event)
    logger.info(f"Request started: {method} {path}", extra={'method': method, 'path': path})

    handler = ROUTES.get((method, path))
    if handler is None:
        logger.warning(f"No route for {method} {path}")
        return error_response(404, 'Not Found')

    try:
        response = handler(event, Services(settings))

    except ApiError as e:
        logger.warning(
            f"Request rejected: {e.message}",
            extra={'status_code': e.status_code, 'path': path}
        )
        return error_response(e.status_code, e.message)

    except Exception as e:
        duration = time.time() - start_time
        logger.error(
            f"Request failed: {str(e)}",
            extra={
                'duration_seconds': round(duration, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )
        return json_response(500, {
            'error': 'サーバーエラーが発生しました',
            'error_type': type(e).__name__
        })

    duration = time.time() - start_time
    logger.info(
        f"Request completed: {method} {path}",
        extra={
            'status_code': response['statusCode'],
            'duration_seconds': round(duration, 2)
        }
    )
    return response
