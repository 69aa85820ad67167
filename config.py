"""Configuration for the stack cleanup tool

This module contains the defaults used when tearing down CloudFormation stacks
and the S3 / S3 Tables resources they own.
For local overrides, use .env.local file.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env.local if it exists
env_path = Path(__file__).parent / ".env.local"
if env_path.exists():
    load_dotenv(dotenv_path=env_path)

# AWS Configuration
DEFAULT_REGION = os.getenv("STACK_CLEANUP_REGION", "us-west-2")

# CloudFormation resource types handled before the stack is deleted
S3_BUCKET_RESOURCE_TYPE = "AWS::S3::Bucket"
S3_TABLE_BUCKET_RESOURCE_TYPE = "AWS::S3Tables::TableBucket"

# Stacks offered for deletion when no stack name is given
LISTABLE_STACK_STATUSES = [
    "CREATE_COMPLETE",
    "CREATE_FAILED",
    "UPDATE_COMPLETE",
    "UPDATE_FAILED",
    "ROLLBACK_COMPLETE",
    "DELETE_FAILED",
]

# Statuses shown in the follow-up monitoring command
MONITOR_STACK_STATUSES = ["DELETE_IN_PROGRESS", "DELETE_FAILED"]

S3_DELETE_BATCH_SIZE = 1000  # DeleteObjects accepts at most 1000 keys

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
