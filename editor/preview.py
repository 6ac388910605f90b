"""Helpers for rendering the live preview of an edited page."""
from typing import Optional

from storage.models import Project

MISSING_URL_WARNING = 'missing'
INSECURE_URL_WARNING = 'insecure'


def normalize_public_url(url: str) -> str:
    """
    Normalize a project's public URL for use as a <base> href.

    Args:
        url: URL as entered by an administrator, scheme optional

    Returns:
        URL with a scheme (https when none was given) and a trailing slash
    """
    url = url.strip()
    if not url.startswith('http://') and not url.startswith('https://'):
        url = 'https://' + url
    return url if url.endswith('/') else url + '/'


def preview_base_url(project: Project) -> str:
    """
    Pick the base URL relative assets resolve against in the preview.

    Falls back to the FTP host and path when no public URL is configured,
    which rarely serves the site over HTTP but is the best available guess.
    """
    if project.public_url and project.public_url.strip():
        return normalize_public_url(project.public_url)

    path = project.ftp_path or '/'
    if not path.endswith('/'):
        path += '/'
    return f"http://{project.ftp_host}{path}"


def inject_base_tag(content: str, base_url: str) -> str:
    """Insert a <base> tag right after the first <head>; no <head>, no change."""
    return content.replace('<head>', f'<head><base href="{base_url}">', 1)


def preview_warning(project: Project) -> Optional[str]:
    if not project.public_url or not project.public_url.strip():
        return MISSING_URL_WARNING
    if project.public_url.strip().startswith('http://'):
        return INSECURE_URL_WARNING
    return None


def render_preview(project: Project, content: str) -> str:
    return inject_base_tag(content, preview_base_url(project))
