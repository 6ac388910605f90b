"""Records kept in the dashboard's record store."""
from dataclasses import dataclass, field
from typing import List, Optional

ADMIN_ROLE = 'admin'
USER_ROLE = 'user'

DEFAULT_FTP_PORT = 21
DEFAULT_FTP_PATH = '/'


@dataclass
class Project:
    """A website whose files can be edited over FTP."""
    id: str
    name: str
    ftp_host: str
    ftp_user: str
    ftp_password_encrypted: str
    ftp_port: int = DEFAULT_FTP_PORT
    ftp_path: str = DEFAULT_FTP_PATH
    target_files: List[str] = field(default_factory=list)
    public_url: Optional[str] = None
    created_at: str = ''

    def to_public_dict(self) -> dict:
        """Serialize for the browser, leaving out the stored credential."""
        return {
            'id': self.id,
            'name': self.name,
            'ftp_host': self.ftp_host,
            'ftp_user': self.ftp_user,
            'ftp_port': self.ftp_port,
            'ftp_path': self.ftp_path,
            'target_files': list(self.target_files),
            'public_url': self.public_url,
            'created_at': self.created_at
        }


@dataclass
class Profile:
    """Dashboard account and its role."""
    id: str
    email: str
    role: str = USER_ROLE
    created_at: str = ''

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'email': self.email,
            'role': self.role,
            'created_at': self.created_at
        }


@dataclass
class UserProject:
    """Assignment of a user to a project."""
    id: str
    user_id: str
    project_id: str
    assigned_at: str = ''

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'project_id': self.project_id,
            'assigned_at': self.assigned_at
        }
