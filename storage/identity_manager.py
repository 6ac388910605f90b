"""Cognito user pool manager for dashboard login accounts."""
import logging
from dataclasses import dataclass
from typing import List, Optional

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


@dataclass
class IdentityUser:
    """Login account in the user pool."""
    user_id: str
    email: str


class UserExistsError(Exception):
    """Raised when an account with the same email already exists."""


class IdentityManager:
    """Manager for login accounts kept in a Cognito user pool."""

    def __init__(self, user_pool_id: str):
        """
        Initialize the Cognito client.

        Args:
            user_pool_id: ID of the user pool holding dashboard accounts
        """
        self.user_pool_id = user_pool_id
        self.client = boto3.client('cognito-idp')
        logger.info(f"Initialized IdentityManager for user pool: {user_pool_id}")

    def create_user(self, email: str, password: str) -> IdentityUser:
        """
        Create a confirmed account with a permanent password.

        Args:
            email: Login email, also used as the username
            password: Initial password

        Returns:
            The created IdentityUser

        Raises:
            UserExistsError: If the email is already registered
            ClientError: For any other Cognito failure
        """
        email = email.strip().lower()
        try:
            response = self.client.admin_create_user(
                UserPoolId=self.user_pool_id,
                Username=email,
                UserAttributes=[
                    {'Name': 'email', 'Value': email},
                    {'Name': 'email_verified', 'Value': 'true'}
                ],
                MessageAction='SUPPRESS'
            )
        except ClientError as e:
            if e.response['Error']['Code'] == 'UsernameExistsException':
                raise UserExistsError(email) from e
            logger.error(f"Error creating user {email}: {e}")
            raise

        self.set_password(email, password)
        user = self._to_identity_user(response['User'])
        logger.info(f"Created user {user.user_id}")
        return user

    def find_user_by_email(self, email: str) -> Optional[IdentityUser]:
        """Look an account up by email; None when it does not exist."""
        email = email.strip().lower()
        try:
            response = self.client.admin_get_user(
                UserPoolId=self.user_pool_id,
                Username=email
            )
        except ClientError as e:
            if e.response['Error']['Code'] == 'UserNotFoundException':
                return None
            logger.error(f"Error looking up user {email}: {e}")
            raise

        return self._to_identity_user({
            'Username': response['Username'],
            'Attributes': response.get('UserAttributes', [])
        })

    def set_password(self, email: str, password: str) -> None:
        self.client.admin_set_user_password(
            UserPoolId=self.user_pool_id,
            Username=email.strip().lower(),
            Password=password,
            Permanent=True
        )

    def delete_user(self, email: str) -> None:
        """Delete an account; a missing account is not an error."""
        try:
            self.client.admin_delete_user(
                UserPoolId=self.user_pool_id,
                Username=email.strip().lower()
            )
        except ClientError as e:
            if e.response['Error']['Code'] == 'UserNotFoundException':
                logger.warning(f"User {email} already absent from user pool")
                return
            raise

    def _to_identity_user(self, user: dict) -> IdentityUser:
        attributes = _attributes(user.get('Attributes', []))
        return IdentityUser(
            user_id=attributes.get('sub') or user['Username'],
            email=attributes.get('email', user['Username'])
        )


def _attributes(pairs: List[dict]) -> dict:
    return {pair['Name']: pair['Value'] for pair in pairs}
