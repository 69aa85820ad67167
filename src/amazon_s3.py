"""Empties Amazon S3 buckets owned by a CloudFormation stack.

A bucket has to be empty before CloudFormation can delete it. This module
removes the current objects first and, when the bucket is versioned, every
remaining object version and delete marker as well.
"""

import logging
from typing import Any, Dict, List

from botocore.exceptions import BotoCoreError, ClientError

from config import S3_DELETE_BATCH_SIZE


def _delete_batch(s3_client: Any, bucket_name: str, objects: List[Dict]) -> int:
    """Deletes one batch of keys and returns how many were removed."""
    response = s3_client.delete_objects(
        Bucket=bucket_name, Delete={"Objects": objects, "Quiet": True}
    )
    errors = response.get("Errors", [])
    for error in errors[:5]:
        logging.warning(
            f"Could not delete s3://{bucket_name}/{error.get('Key')}: "
            f"{error.get('Code')} {error.get('Message')}"
        )
    return len(objects) - len(errors)


def delete_current_objects(s3_client: Any, bucket_name: str) -> int:
    """Deletes every current object in the bucket, like ``aws s3 rm --recursive``.

    Args:
        s3_client: A boto3 S3 client.
        bucket_name (str): The bucket to empty.

    Returns:
        int: Number of objects deleted.

    Raises:
        botocore.exceptions.ClientError: If listing or deleting fails.
    """
    paginator = s3_client.get_paginator("list_objects_v2")
    pages = paginator.paginate(Bucket=bucket_name)

    objects_to_delete: List[Dict] = []
    delete_count = 0
    for page in pages:
        for obj in page.get("Contents", []):
            objects_to_delete.append({"Key": obj["Key"]})
            if len(objects_to_delete) >= S3_DELETE_BATCH_SIZE:
                delete_count += _delete_batch(s3_client, bucket_name, objects_to_delete)
                objects_to_delete = []

    if objects_to_delete:
        delete_count += _delete_batch(s3_client, bucket_name, objects_to_delete)
    return delete_count


def has_object_versions(s3_client: Any, bucket_name: str) -> bool:
    """Checks whether any object version or delete marker is left in the bucket."""
    response = s3_client.list_object_versions(Bucket=bucket_name, MaxKeys=1)
    return bool(response.get("Versions") or response.get("DeleteMarkers"))


def delete_object_versions(s3_client: Any, bucket_name: str) -> int:
    """Deletes all object versions and delete markers from the bucket."""
    paginator = s3_client.get_paginator("list_object_versions")
    pages = paginator.paginate(Bucket=bucket_name)

    versions: List[Dict] = []
    delete_count = 0
    for page in pages:
        for obj in page.get("Versions", []) + page.get("DeleteMarkers", []):
            versions.append({"Key": obj["Key"], "VersionId": obj["VersionId"]})
            if len(versions) >= S3_DELETE_BATCH_SIZE:
                delete_count += _delete_batch(s3_client, bucket_name, versions)
                versions = []

    if versions:
        delete_count += _delete_batch(s3_client, bucket_name, versions)
    return delete_count


def _is_missing_bucket(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == "NoSuchBucket"


def empty_bucket(s3_client: Any, bucket_name: str) -> bool:
    """Empties a bucket, including old versions when versioning is on.

    Each step is best-effort: a failure is logged and the next step still
    runs. A bucket that no longer exists counts as empty.

    Returns:
        bool: True if every step succeeded, False otherwise.
    """
    print(f"    Emptying bucket: {bucket_name}")
    success = True

    try:
        deleted = delete_current_objects(s3_client, bucket_name)
        if deleted:
            print(f"      Deleted {deleted} objects")
    except ClientError as e:
        if _is_missing_bucket(e):
            print(f"      Bucket {bucket_name} does not exist")
            return True
        logging.warning(f"Error deleting objects from {bucket_name}: {e}")
        success = False
    except BotoCoreError as e:
        logging.warning(f"Error deleting objects from {bucket_name}: {e}")
        success = False

    try:
        if has_object_versions(s3_client, bucket_name):
            print("      Deleting versioned objects...")
            delete_object_versions(s3_client, bucket_name)
            print("      Deleted all versions")
    except (ClientError, BotoCoreError) as e:
        logging.warning(f"Failed to delete versions from {bucket_name}: {e}")
        success = False

    return success
