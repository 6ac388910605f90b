"""DynamoDB manager for projects, profiles and project assignments."""
import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from storage.models import (
    DEFAULT_FTP_PATH,
    DEFAULT_FTP_PORT,
    USER_ROLE,
    Profile,
    Project,
    UserProject,
)

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class DynamoDBManager:
    """Manager for the dashboard's DynamoDB tables."""

    BATCH_SIZE = 25  # DynamoDB batch operation limit

    def __init__(self, projects_table: str, profiles_table: str, assignments_table: str):
        """
        Initialize DynamoDB resource and table references.

        Args:
            projects_table: Name of the table holding projects
            profiles_table: Name of the table holding user profiles
            assignments_table: Name of the table holding user/project assignments
        """
        self.dynamodb = boto3.resource('dynamodb')
        self.projects = self.dynamodb.Table(projects_table)
        self.profiles = self.dynamodb.Table(profiles_table)
        self.assignments = self.dynamodb.Table(assignments_table)
        logger.info(
            f"Initialized DynamoDBManager for tables: {projects_table}, "
            f"{profiles_table}, {assignments_table}"
        )

    # Projects

    def list_projects(self) -> List[Project]:
        """Return every project, sorted by name."""
        projects = [self._item_to_project(item) for item in self._scan_all(self.projects)]
        return sorted((p for p in projects if p), key=lambda p: p.name)

    def get_project(self, project_id: str) -> Optional[Project]:
        item = self._get_item(self.projects, {'id': project_id})
        return self._item_to_project(item) if item else None

    def create_project(
        self,
        name: str,
        ftp_host: str,
        ftp_user: str,
        ftp_password_encrypted: str,
        ftp_port: Optional[int] = None,
        ftp_path: Optional[str] = None,
        target_files: Optional[List[str]] = None,
        public_url: Optional[str] = None
    ) -> Project:
        """
        Store a new project.

        Args:
            name: Display name
            ftp_host: FTP server host name
            ftp_user: FTP login
            ftp_password_encrypted: Password token produced by PasswordCipher
            ftp_port: FTP port (default: 21)
            ftp_path: Directory to change into after login (default: '/')
            target_files: Files users may edit
            public_url: URL the site is served from, used by the preview

        Returns:
            The stored Project
        """
        project = Project(
            id=str(uuid.uuid4()),
            name=name,
            ftp_host=ftp_host,
            ftp_user=ftp_user,
            ftp_password_encrypted=ftp_password_encrypted,
            ftp_port=ftp_port or DEFAULT_FTP_PORT,
            ftp_path=ftp_path or DEFAULT_FTP_PATH,
            target_files=list(target_files or []),
            public_url=public_url or None,
            created_at=_now()
        )
        self._put_item(self.projects, self._project_to_item(project))
        logger.info(f"Created project {project.id}", extra={'project_name': name})
        return project

    def update_project(self, project_id: str, **changes: Any) -> Optional[Project]:
        """
        Overwrite fields of an existing project.

        Args:
            project_id: ID of the project to update
            **changes: Project field names and their new values

        Returns:
            The updated Project, or None if it does not exist
        """
        project = self.get_project(project_id)
        if not project:
            return None

        updated = replace(project, **changes)
        self._put_item(self.projects, self._project_to_item(updated))
        logger.info(f"Updated project {project_id}", extra={'fields': sorted(changes)})
        return updated

    def delete_project(self, project_id: str) -> None:
        """Delete a project together with all of its assignments."""
        self.delete_assignments(project_id=project_id)
        self._delete_item(self.projects, {'id': project_id})
        logger.info(f"Deleted project {project_id}")

    # Profiles

    def list_profiles(self) -> List[Profile]:
        profiles = [self._item_to_profile(item) for item in self._scan_all(self.profiles)]
        return sorted((p for p in profiles if p), key=lambda p: p.email)

    def get_profile(self, user_id: str) -> Optional[Profile]:
        item = self._get_item(self.profiles, {'id': user_id})
        return self._item_to_profile(item) if item else None

    def create_profile(self, user_id: str, email: str, role: str = USER_ROLE) -> Profile:
        profile = Profile(id=user_id, email=email, role=role, created_at=_now())
        self._put_item(self.profiles, profile.to_dict())
        logger.info(f"Created profile {user_id}", extra={'role': role})
        return profile

    def delete_profile(self, user_id: str) -> None:
        self._delete_item(self.profiles, {'id': user_id})
        logger.info(f"Deleted profile {user_id}")

    # Assignments

    def get_assignment(self, user_id: str, project_id: str) -> Optional[UserProject]:
        """Return the assignment of a user to a project, if any."""
        matches = self.list_assignments(user_id=user_id, project_id=project_id)
        return matches[0] if matches else None

    def list_assignments(
        self,
        user_id: Optional[str] = None,
        project_id: Optional[str] = None
    ) -> List[UserProject]:
        """
        List assignments, optionally filtered by user and/or project.

        Args:
            user_id: Only return assignments of this user
            project_id: Only return assignments to this project

        Returns:
            Matching UserProject objects
        """
        condition = None
        if user_id is not None:
            condition = Attr('user_id').eq(user_id)
        if project_id is not None:
            project_condition = Attr('project_id').eq(project_id)
            condition = project_condition if condition is None else condition & project_condition

        kwargs = {'FilterExpression': condition} if condition is not None else {}
        assignments = [
            self._item_to_assignment(item)
            for item in self._scan_all(self.assignments, **kwargs)
        ]
        return [a for a in assignments if a]

    def create_assignment(self, user_id: str, project_id: str) -> UserProject:
        assignment = UserProject(
            id=str(uuid.uuid4()),
            user_id=user_id,
            project_id=project_id,
            assigned_at=_now()
        )
        self._put_item(self.assignments, assignment.to_dict())
        logger.info(f"Assigned user {user_id} to project {project_id}")
        return assignment

    def delete_assignment(self, assignment_id: str) -> None:
        self._delete_item(self.assignments, {'id': assignment_id})
        logger.info(f"Deleted assignment {assignment_id}")

    def delete_assignments(
        self,
        user_id: Optional[str] = None,
        project_id: Optional[str] = None
    ) -> int:
        """
        Delete every assignment of a user or to a project.

        Returns:
            Count of deleted assignments
        """
        if user_id is None and project_id is None:
            raise ValueError('user_id or project_id is required')

        assignment_ids = [
            a.id for a in self.list_assignments(user_id=user_id, project_id=project_id)
        ]
        return self.batch_delete(self.assignments, assignment_ids)

    def batch_delete(self, table, ids: List[str]) -> int:
        """
        Delete items by id in batches of 25.

        Args:
            table: DynamoDB Table resource
            ids: Primary key values to delete

        Returns:
            Count of deleted items
        """
        if not ids:
            return 0

        logger.info(f"Deleting {len(ids)} items from {table.name}")
        deleted = 0

        for i in range(0, len(ids), self.BATCH_SIZE):
            batch = ids[i:i + self.BATCH_SIZE]
            with table.batch_writer() as writer:
                for item_id in batch:
                    writer.delete_item(Key={'id': item_id})
                    deleted += 1

        return deleted

    # Low level helpers

    def _scan_all(self, table, **kwargs) -> List[Dict[str, Any]]:
        """Scan a whole table, following pagination."""
        try:
            response = table.scan(**kwargs)
            items = response.get('Items', [])

            while 'LastEvaluatedKey' in response:
                response = table.scan(
                    ExclusiveStartKey=response['LastEvaluatedKey'],
                    **kwargs
                )
                items.extend(response.get('Items', []))

            return items

        except ClientError as e:
            logger.error(f"Error scanning DynamoDB table {table.name}: {e}")
            raise

    def _get_item(self, table, key: Dict[str, str]) -> Optional[Dict[str, Any]]:
        try:
            return table.get_item(Key=key).get('Item')
        except ClientError as e:
            logger.error(f"Error reading {key} from {table.name}: {e}")
            raise

    def _put_item(self, table, item: Dict[str, Any]) -> None:
        try:
            table.put_item(Item=item)
        except ClientError as e:
            logger.error(f"Error writing item to {table.name}: {e}")
            raise

    def _delete_item(self, table, key: Dict[str, str]) -> None:
        try:
            table.delete_item(Key=key)
        except ClientError as e:
            logger.error(f"Error deleting {key} from {table.name}: {e}")
            raise

    def _item_to_project(self, item: dict) -> Optional[Project]:
        """
        Convert DynamoDB item to Project object.

        Args:
            item: DynamoDB item dictionary

        Returns:
            Project object or None if conversion fails
        """
        try:
            return Project(
                id=item['id'],
                name=item['name'],
                ftp_host=item['ftp_host'],
                ftp_user=item['ftp_user'],
                ftp_password_encrypted=item['ftp_password_encrypted'],
                ftp_port=int(item.get('ftp_port', DEFAULT_FTP_PORT)),
                ftp_path=item.get('ftp_path', DEFAULT_FTP_PATH),
                target_files=list(item.get('target_files', [])),
                public_url=item.get('public_url'),
                created_at=item.get('created_at', '')
            )
        except (KeyError, ValueError) as e:
            logger.warning(f"Failed to convert item to Project: {e}")
            return None

    def _project_to_item(self, project: Project) -> dict:
        item = {
            'id': project.id,
            'name': project.name,
            'ftp_host': project.ftp_host,
            'ftp_user': project.ftp_user,
            'ftp_password_encrypted': project.ftp_password_encrypted,
            'ftp_port': project.ftp_port,
            'ftp_path': project.ftp_path,
            'target_files': list(project.target_files),
            'created_at': project.created_at
        }

        # Add optional fields if present
        if project.public_url:
            item['public_url'] = project.public_url

        return item

    def _item_to_profile(self, item: dict) -> Optional[Profile]:
        try:
            return Profile(
                id=item['id'],
                email=item['email'],
                role=item.get('role', USER_ROLE),
                created_at=item.get('created_at', '')
            )
        except KeyError as e:
            logger.warning(f"Failed to convert item to Profile: {e}")
            return None

    def _item_to_assignment(self, item: dict) -> Optional[UserProject]:
        try:
            return UserProject(
                id=item['id'],
                user_id=item['user_id'],
                project_id=item['project_id'],
                assigned_at=item.get('assigned_at', '')
            )
        except KeyError as e:
            logger.warning(f"Failed to convert item to UserProject: {e}")
            return None
