"""Interfaces with AWS CloudFormation for stack discovery and deletion.

Every helper here is best-effort: AWS errors are logged and turned into an
empty result (or ``None`` / ``False``) so the caller can keep going.
"""

import logging
from collections import namedtuple
from typing import Any, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

StackSummary = namedtuple("StackSummary", ["name", "status"])


def get_stack_status(cfn_client: Any, stack_name: str) -> Optional[str]:
    """Returns the current status of a stack.

    Args:
        cfn_client: A boto3 CloudFormation client.
        stack_name (str): Name or ID of the stack.

    Returns:
        Optional[str]: The ``StackStatus`` value, or None if the stack does not
            exist or could not be described.
    """
    try:
        response = cfn_client.describe_stacks(StackName=stack_name)
    except ClientError as e:
        message = e.response.get("Error", {}).get("Message", str(e))
        if "does not exist" not in message:
            logging.warning(f"Error describing stack {stack_name}: {e}")
        return None
    except BotoCoreError as e:
        logging.warning(f"Error describing stack {stack_name}: {e}")
        return None

    stacks = response.get("Stacks", [])
    if not stacks:
        return None
    return stacks[0].get("StackStatus")


def list_stacks(cfn_client: Any, statuses: List[str]) -> List[StackSummary]:
    """Lists stacks whose status is in ``statuses``."""
    stacks = []
    try:
        paginator = cfn_client.get_paginator("list_stacks")
        for page in paginator.paginate(StackStatusFilter=statuses):
            for summary in page.get("StackSummaries", []):
                stacks.append(
                    StackSummary(summary["StackName"], summary["StackStatus"])
                )
    except (ClientError, BotoCoreError) as e:
        logging.warning(f"Error listing CloudFormation stacks: {e}")
        return []
    return stacks


def list_stack_resource_ids(
    cfn_client: Any, stack_name: str, resource_type: str
) -> List[str]:
    """Returns the physical IDs of the stack resources of one type.

    Resources that were never created (no physical ID yet) are skipped.
    """
    resource_ids = []
    try:
        paginator = cfn_client.get_paginator("list_stack_resources")
        for page in paginator.paginate(StackName=stack_name):
            for resource in page.get("StackResourceSummaries", []):
                if resource.get("ResourceType") != resource_type:
                    continue
                physical_id = resource.get("PhysicalResourceId")
                if physical_id:
                    resource_ids.append(physical_id)
    except (ClientError, BotoCoreError) as e:
        logging.warning(
            f"Error listing {resource_type} resources of stack {stack_name}: {e}"
        )
        return []
    return resource_ids


def delete_stack(cfn_client: Any, stack_name: str) -> bool:
    """Requests deletion of a stack. Does not wait for it to finish."""
    try:
        cfn_client.delete_stack(StackName=stack_name)
    except (ClientError, BotoCoreError) as e:
        logging.warning(f"Failed to initiate deletion of stack {stack_name}: {e}")
        return False
    return True
