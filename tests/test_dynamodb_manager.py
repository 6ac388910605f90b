"""Unit tests for DynamoDB manager."""
import os
from unittest.mock import patch

import boto3
import pytest
from moto import mock_aws

from storage.dynamodb_manager import DynamoDBManager

TABLES = ('test-projects', 'test-profiles', 'test-user-projects')


@pytest.fixture
def aws_env():
    """Fake credentials so boto3 never reaches a real account."""
    env_vars = {
        'AWS_ACCESS_KEY_ID': 'testing',
        'AWS_SECRET_ACCESS_KEY': 'testing',
        'AWS_DEFAULT_REGION': 'us-east-1'
    }
    with patch.dict(os.environ, env_vars):
        yield env_vars


@pytest.fixture
def dynamodb_tables(aws_env):
    """Create mock DynamoDB tables for testing."""
    with mock_aws():
        dynamodb = boto3.resource('dynamodb', region_name='us-east-1')

        for name in TABLES:
            dynamodb.create_table(
                TableName=name,
                KeySchema=[
                    {'AttributeName': 'id', 'KeyType': 'HASH'}
                ],
                AttributeDefinitions=[
                    {'AttributeName': 'id', 'AttributeType': 'S'}
                ],
                BillingMode='PAY_PER_REQUEST'
            )

        yield dynamodb


@pytest.fixture
def dynamodb_manager(dynamodb_tables):
    """Create DynamoDBManager instance with mock tables."""
    return DynamoDBManager(*TABLES)


@pytest.fixture
def sample_project(dynamodb_manager):
    return dynamodb_manager.create_project(
        name='Civic Hall',
        ftp_host='ftp.example.jp',
        ftp_user='hall',
        ftp_password_encrypted='iv:tag:ciphertext',
        target_files=['index.html', 'event.html']
    )


def test_list_projects_empty_table(dynamodb_manager):
    assert dynamodb_manager.list_projects() == []


def test_create_project_applies_defaults(dynamodb_manager, sample_project):
    assert sample_project.ftp_port == 21
    assert sample_project.ftp_path == '/'
    assert sample_project.public_url is None
    assert sample_project.created_at

    stored = dynamodb_manager.get_project(sample_project.id)

    assert stored == sample_project
    assert isinstance(stored.ftp_port, int)
    assert stored.target_files == ['index.html', 'event.html']


def test_get_missing_project(dynamodb_manager):
    assert dynamodb_manager.get_project('does-not-exist') is None


def test_update_project(dynamodb_manager, sample_project):
    updated = dynamodb_manager.update_project(
        sample_project.id,
        name='Civic Hall Annex',
        public_url='https://hall.example.jp'
    )

    assert updated.name == 'Civic Hall Annex'
    assert updated.ftp_password_encrypted == 'iv:tag:ciphertext'
    assert dynamodb_manager.get_project(sample_project.id).public_url == 'https://hall.example.jp'


def test_update_missing_project(dynamodb_manager):
    assert dynamodb_manager.update_project('does-not-exist', name='x') is None


def test_list_projects_sorted_by_name(dynamodb_manager):
    for name in ('Zoo', 'Aquarium', 'Museum'):
        dynamodb_manager.create_project(name, 'ftp.example.jp', 'u', 'token')

    assert [p.name for p in dynamodb_manager.list_projects()] == ['Aquarium', 'Museum', 'Zoo']


def test_delete_project_removes_assignments(dynamodb_manager, sample_project):
    other = dynamodb_manager.create_project('Other', 'ftp.example.jp', 'u', 'token')
    dynamodb_manager.create_assignment('user-1', sample_project.id)
    dynamodb_manager.create_assignment('user-2', sample_project.id)
    kept = dynamodb_manager.create_assignment('user-1', other.id)

    dynamodb_manager.delete_project(sample_project.id)

    assert dynamodb_manager.get_project(sample_project.id) is None
    assert dynamodb_manager.list_assignments() == [kept]


def test_profiles(dynamodb_manager):
    dynamodb_manager.create_profile('user-2', 'b@example.jp')
    admin = dynamodb_manager.create_profile('user-1', 'a@example.jp', role='admin')

    assert dynamodb_manager.get_profile('user-1') == admin
    assert admin.is_admin is True
    assert [p.email for p in dynamodb_manager.list_profiles()] == ['a@example.jp', 'b@example.jp']

    dynamodb_manager.delete_profile('user-1')
    assert dynamodb_manager.get_profile('user-1') is None


def test_get_assignment(dynamodb_manager, sample_project):
    assignment = dynamodb_manager.create_assignment('user-1', sample_project.id)

    assert dynamodb_manager.get_assignment('user-1', sample_project.id) == assignment
    assert dynamodb_manager.get_assignment('user-2', sample_project.id) is None


def test_list_assignments_filters(dynamodb_manager):
    dynamodb_manager.create_assignment('user-1', 'project-1')
    dynamodb_manager.create_assignment('user-1', 'project-2')
    dynamodb_manager.create_assignment('user-2', 'project-1')

    assert len(dynamodb_manager.list_assignments()) == 3
    assert {a.project_id for a in dynamodb_manager.list_assignments(user_id='user-1')} == \
        {'project-1', 'project-2'}
    assert {a.user_id for a in dynamodb_manager.list_assignments(project_id='project-1')} == \
        {'user-1', 'user-2'}


def test_delete_assignment(dynamodb_manager):
    assignment = dynamodb_manager.create_assignment('user-1', 'project-1')

    dynamodb_manager.delete_assignment(assignment.id)

    assert dynamodb_manager.list_assignments() == []


def test_delete_assignments_in_batches(dynamodb_manager):
    """Test deleting more assignments than fit in one batch."""
    for i in range(30):
        dynamodb_manager.create_assignment('user-1', f'project-{i}')
    dynamodb_manager.create_assignment('user-2', 'project-0')

    deleted = dynamodb_manager.delete_assignments(user_id='user-1')

    assert deleted == 30
    assert [a.user_id for a in dynamodb_manager.list_assignments()] == ['user-2']


def test_delete_assignments_requires_filter(dynamodb_manager):
    with pytest.raises(ValueError):
        dynamodb_manager.delete_assignments()


def test_malformed_item_is_skipped(dynamodb_manager, dynamodb_tables):
    dynamodb_tables.Table('test-projects').put_item(Item={'id': 'broken'})

    assert dynamodb_manager.list_projects() == []
