import json
import logging
import os
from unittest.mock import MagicMock

import boto3
import pytest
from botocore.exceptions import ClientError, NoCredentialsError
from moto import mock_aws

from config import LISTABLE_STACK_STATUSES, S3_BUCKET_RESOURCE_TYPE
from src.amazon_cloudformation import (
    StackSummary,
    delete_stack,
    get_stack_status,
    list_stack_resource_ids,
    list_stacks,
)

TEST_REGION = "us-east-1"
TEST_STACK_NAME = "test-data-stack"

BUCKET_TEMPLATE = {
    "AWSTemplateFormatVersion": "2010-09-09",
    "Resources": {
        "DataBucket": {
            "Type": "AWS::S3::Bucket",
            "Properties": {"BucketName": "test-data-bucket"},
        },
        "LogsBucket": {
            "Type": "AWS::S3::Bucket",
            "Properties": {"BucketName": "test-logs-bucket"},
        },
        "Topic": {"Type": "AWS::SNS::Topic"},
    },
}


@pytest.fixture(scope="function")
def aws_credentials():
    """Mocked AWS Credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = TEST_REGION


@pytest.fixture(scope="function")
def cfn_client(aws_credentials):
    with mock_aws():
        client = boto3.client("cloudformation", region_name=TEST_REGION)
        client.create_stack(
            StackName=TEST_STACK_NAME, TemplateBody=json.dumps(BUCKET_TEMPLATE)
        )
        yield client


def test_get_stack_status_existing(cfn_client):
    assert get_stack_status(cfn_client, TEST_STACK_NAME) == "CREATE_COMPLETE"


def test_get_stack_status_missing_stack(cfn_client, caplog):
    caplog.set_level(logging.WARNING)
    assert get_stack_status(cfn_client, "no-such-stack") is None
    assert "Error describing stack" not in caplog.text


def test_get_stack_status_other_error_is_logged(caplog):
    caplog.set_level(logging.WARNING)
    cfn_client = MagicMock()
    cfn_client.describe_stacks.side_effect = ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "not allowed"}}, "DescribeStacks"
    )
    assert get_stack_status(cfn_client, "stack") is None
    assert "Error describing stack stack" in caplog.text


def test_get_stack_status_without_credentials():
    cfn_client = MagicMock()
    cfn_client.describe_stacks.side_effect = NoCredentialsError()
    assert get_stack_status(cfn_client, "stack") is None


def test_list_stacks(cfn_client):
    stacks = list_stacks(cfn_client, LISTABLE_STACK_STATUSES)
    assert stacks == [StackSummary(TEST_STACK_NAME, "CREATE_COMPLETE")]


def test_list_stacks_filters_by_status(cfn_client):
    assert list_stacks(cfn_client, ["DELETE_FAILED"]) == []


def test_list_stacks_error_returns_empty(caplog):
    caplog.set_level(logging.WARNING)
    cfn_client = MagicMock()
    cfn_client.get_paginator.return_value.paginate.side_effect = ClientError(
        {"Error": {"Code": "Throttling", "Message": "slow down"}}, "ListStacks"
    )
    assert list_stacks(cfn_client, LISTABLE_STACK_STATUSES) == []
    assert "Error listing CloudFormation stacks" in caplog.text


def test_list_stack_resource_ids_filters_type(cfn_client):
    bucket_ids = list_stack_resource_ids(
        cfn_client, TEST_STACK_NAME, S3_BUCKET_RESOURCE_TYPE
    )
    assert sorted(bucket_ids) == ["test-data-bucket", "test-logs-bucket"]


def test_list_stack_resource_ids_no_matches(cfn_client):
    assert (
        list_stack_resource_ids(
            cfn_client, TEST_STACK_NAME, "AWS::S3Tables::TableBucket"
        )
        == []
    )


def test_list_stack_resource_ids_skips_missing_physical_id():
    cfn_client = MagicMock()
    cfn_client.get_paginator.return_value.paginate.return_value = [
        {
            "StackResourceSummaries": [
                {"ResourceType": "AWS::S3::Bucket", "PhysicalResourceId": "one"},
                {"ResourceType": "AWS::S3::Bucket"},
                {"ResourceType": "AWS::S3::Bucket", "PhysicalResourceId": ""},
            ]
        },
        {
            "StackResourceSummaries": [
                {"ResourceType": "AWS::S3::Bucket", "PhysicalResourceId": "two"}
            ]
        },
    ]
    assert list_stack_resource_ids(cfn_client, "s", "AWS::S3::Bucket") == ["one", "two"]
    cfn_client.get_paginator.assert_called_once_with("list_stack_resources")


def test_list_stack_resource_ids_missing_stack(cfn_client, caplog):
    caplog.set_level(logging.WARNING)
    assert list_stack_resource_ids(cfn_client, "missing", S3_BUCKET_RESOURCE_TYPE) == []
    assert "resources of stack missing" in caplog.text


def test_delete_stack(cfn_client):
    assert delete_stack(cfn_client, TEST_STACK_NAME) is True
    assert list_stacks(cfn_client, LISTABLE_STACK_STATUSES) == []


def test_delete_stack_failure(caplog):
    caplog.set_level(logging.WARNING)
    cfn_client = MagicMock()
    cfn_client.delete_stack.side_effect = ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "DeleteStack"
    )
    assert delete_stack(cfn_client, "stack") is False
    assert "Failed to initiate deletion of stack stack" in caplog.text
