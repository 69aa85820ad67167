"""Tears down Amazon S3 Tables resources inside a table bucket.

CloudFormation cannot delete a table bucket that still holds namespaces, and a
namespace cannot be deleted while it holds tables, so tables go first.
"""

import logging
from typing import Any, List

from botocore.exceptions import BotoCoreError, ClientError


def _namespace_name(entry: Any) -> str:
    # ListNamespaces and ListTables return the namespace as a list of levels
    if isinstance(entry, list):
        return ".".join(entry)
    return entry


def list_namespaces(s3tables_client: Any, table_bucket_arn: str) -> List[str]:
    """Lists the namespaces of a table bucket, or [] if they cannot be listed."""
    namespaces = []
    try:
        paginator = s3tables_client.get_paginator("list_namespaces")
        for page in paginator.paginate(tableBucketARN=table_bucket_arn):
            for entry in page.get("namespaces", []):
                name = _namespace_name(entry.get("namespace"))
                if name:
                    namespaces.append(name)
    except (ClientError, BotoCoreError) as e:
        logging.warning(f"Error listing namespaces of {table_bucket_arn}: {e}")
        return []
    return namespaces


def list_tables(
    s3tables_client: Any, table_bucket_arn: str, namespace: str
) -> List[str]:
    """Lists the table names in one namespace, or [] if they cannot be listed."""
    tables = []
    try:
        paginator = s3tables_client.get_paginator("list_tables")
        pages = paginator.paginate(tableBucketARN=table_bucket_arn, namespace=namespace)
        for page in pages:
            for table in page.get("tables", []):
                if table.get("name"):
                    tables.append(table["name"])
    except (ClientError, BotoCoreError) as e:
        logging.warning(f"Error listing tables in namespace {namespace}: {e}")
        return []
    return tables


def delete_table(
    s3tables_client: Any, table_bucket_arn: str, namespace: str, table_name: str
) -> bool:
    try:
        s3tables_client.delete_table(
            tableBucketARN=table_bucket_arn, namespace=namespace, name=table_name
        )
    except (ClientError, BotoCoreError) as e:
        logging.warning(f"Failed to delete table {namespace}.{table_name}: {e}")
        return False
    return True


def delete_namespace(
    s3tables_client: Any, table_bucket_arn: str, namespace: str
) -> bool:
    try:
        s3tables_client.delete_namespace(
            tableBucketARN=table_bucket_arn, namespace=namespace
        )
    except (ClientError, BotoCoreError) as e:
        logging.warning(f"Failed to delete namespace {namespace}: {e}")
        return False
    return True


def delete_table_bucket_contents(s3tables_client: Any, table_bucket_arn: str) -> bool:
    """Deletes every table and namespace in a table bucket.

    The bucket itself is left for CloudFormation to remove with the stack.

    Args:
        s3tables_client: A boto3 S3 Tables client.
        table_bucket_arn (str): ARN of the table bucket.

    Returns:
        bool: True if every delete call succeeded, False otherwise.
    """
    print(f"    Processing S3 Tables bucket: {table_bucket_arn}")

    namespaces = list_namespaces(s3tables_client, table_bucket_arn)
    if not namespaces:
        print("      No namespaces found")
        return True

    success = True
    for namespace in namespaces:
        print(f"      Namespace: {namespace}")

        for table_name in list_tables(s3tables_client, table_bucket_arn, namespace):
            print(f"        Deleting table: {table_name}")
            if not delete_table(s3tables_client, table_bucket_arn, namespace, table_name):
                success = False

        print(f"        Deleting namespace: {namespace}")
        if not delete_namespace(s3tables_client, table_bucket_arn, namespace):
            success = False

    return success
