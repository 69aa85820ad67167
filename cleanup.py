#!/usr/bin/env python3
"""
CloudFormation Stack Cleanup Script

Deletes CloudFormation stacks together with the resources that would otherwise
block the deletion:
    1. Empties all S3 buckets in the stack (including old object versions)
    2. Deletes all S3 Tables tables and namespaces in the stack's table buckets
    3. Requests deletion of the CloudFormation stack

Usage:
    python cleanup.py [region] [stack_name] [--dry-run] [--yes]

Examples:
    python cleanup.py                              # Prompt for every stack in the default region
    python cleanup.py us-east-1                    # Prompt for every stack in us-east-1
    python cleanup.py us-west-2 my-stack           # Delete one stack without prompting
    python cleanup.py us-west-2 my-stack --dry-run # Show what would be deleted
"""

import argparse
import logging
import re
import sys
from typing import Callable, Dict, List, Optional

import boto3

from cleanup_logic.progress_indicator import Colors, ProgressIndicator
from config import (
    DEFAULT_REGION,
    LISTABLE_STACK_STATUSES,
    LOG_FORMAT,
    MONITOR_STACK_STATUSES,
    S3_BUCKET_RESOURCE_TYPE,
    S3_TABLE_BUCKET_RESOURCE_TYPE,
)
from src.amazon_cloudformation import (
    StackSummary,
    delete_stack,
    get_stack_status,
    list_stack_resource_ids,
    list_stacks,
)
from src.amazon_s3 import empty_bucket
from src.amazon_s3tables import delete_table_bucket_contents, list_namespaces, list_tables

CONFIRM_PATTERN = re.compile(r"^[Yy]$")


class StackCleanup:
    def __init__(
        self,
        region: str = DEFAULT_REGION,
        dry_run: bool = False,
        session: Optional[boto3.Session] = None,
    ):
        self.region = region
        self.dry_run = dry_run
        self.session = session or boto3.Session(region_name=region)

        # Initialize clients
        self.cloudformation = self.session.client("cloudformation", region_name=region)
        self.s3 = self.session.client("s3", region_name=region)
        self.s3tables = self.session.client("s3tables", region_name=region)

        self.progress = ProgressIndicator(total_steps=3)
        self.results: Dict[str, List[str]] = {
            "initiated": [],
            "skipped": [],
            "failed": [],
        }

    def _empty_stack_buckets(self, stack_name: str) -> None:
        """Empty every AWS::S3::Bucket resource of the stack."""
        buckets = list_stack_resource_ids(
            self.cloudformation, stack_name, S3_BUCKET_RESOURCE_TYPE
        )
        if not buckets:
            print("    No S3 buckets found in stack")
            return

        for bucket in buckets:
            if self.dry_run:
                print(f"    [DRY RUN] Would empty bucket: {bucket}")
                continue
            if not empty_bucket(self.s3, bucket):
                self.progress.warning(f"Bucket {bucket} may not be empty")

    def _dry_run_table_bucket(self, table_bucket_arn: str) -> None:
        print(f"    Processing S3 Tables bucket: {table_bucket_arn}")
        namespaces = list_namespaces(self.s3tables, table_bucket_arn)
        if not namespaces:
            print("      No namespaces found")
            return
        for namespace in namespaces:
            for table_name in list_tables(self.s3tables, table_bucket_arn, namespace):
                print(f"      [DRY RUN] Would delete table: {namespace}.{table_name}")
            print(f"      [DRY RUN] Would delete namespace: {namespace}")

    def _clean_stack_table_buckets(self, stack_name: str) -> None:
        """Delete tables and namespaces of every AWS::S3Tables::TableBucket resource."""
        table_bucket_arns = list_stack_resource_ids(
            self.cloudformation, stack_name, S3_TABLE_BUCKET_RESOURCE_TYPE
        )
        if not table_bucket_arns:
            print("    No S3 Tables buckets found in stack")
            return

        for arn in table_bucket_arns:
            if self.dry_run:
                self._dry_run_table_bucket(arn)
                continue
            if not delete_table_bucket_contents(self.s3tables, arn):
                self.progress.warning(f"Table bucket {arn} may still hold tables")

    def delete_stack(self, stack_name: str) -> bool:
        """Empty the stack's storage resources, then request stack deletion.

        Returns:
            bool: True if the stack deletion was requested.
        """
        self.progress.header(f"Deleting stack: {stack_name}")

        self.progress.next_step("Finding and emptying S3 buckets...")
        self._empty_stack_buckets(stack_name)

        self.progress.next_step("Finding and cleaning S3 Tables resources...")
        self._clean_stack_table_buckets(stack_name)

        self.progress.next_step("Deleting CloudFormation stack...")
        if self.dry_run:
            print(f"    [DRY RUN] Would delete stack: {stack_name}")
            self.results["initiated"].append(stack_name)
            return True

        if not delete_stack(self.cloudformation, stack_name):
            self.progress.warning("Failed to initiate stack deletion")
            self.results["failed"].append(stack_name)
            return False

        self.progress.success(f"Stack deletion initiated for: {stack_name}")
        self.results["initiated"].append(stack_name)
        return True

    def _ask(self, stack: StackSummary, confirm: Callable[[str], str]) -> bool:
        try:
            response = confirm(f"Delete stack '{stack.name}' ({stack.status})? [y/N] ")
        except EOFError:
            return False
        return bool(CONFIRM_PATTERN.match(response.strip()))

    def _run_named(self, stack_name: str) -> int:
        status = get_stack_status(self.cloudformation, stack_name)
        if status is None:
            print(f"Stack '{stack_name}' not found in region {self.region}")
            return 1

        print(f"Found stack: {stack_name} (status: {status})")
        self.delete_stack(stack_name)
        return 0

    def _run_interactive(
        self, confirm: Callable[[str], str], assume_yes: bool
    ) -> Optional[int]:
        print("Fetching CloudFormation stacks...")
        stacks = list_stacks(self.cloudformation, LISTABLE_STACK_STATUSES)
        if not stacks:
            print(f"No stacks found in region {self.region}")
            return 0

        print("\nFound stacks:")
        for stack in stacks:
            print(f"  - {stack.name} ({stack.status})")
        print()

        for stack in stacks:
            if assume_yes or self._ask(stack, confirm):
                self.delete_stack(stack.name)
            else:
                print(f"  Skipping: {stack.name}")
                self.results["skipped"].append(stack.name)
        return None

    def _print_summary(self) -> None:
        print(f"\n{Colors.BOLD}=== Done {'(DRY RUN) ' if self.dry_run else ''}==={Colors.ENDC}")
        print(f"Stack deletions initiated: {len(self.results['initiated'])}")
        if self.results["skipped"]:
            print(f"Stacks skipped: {len(self.results['skipped'])}")
        if self.results["failed"]:
            print("\nFailed operations:")
            for stack_name in self.results["failed"]:
                print(f"  - Stack deletion request failed: {stack_name}")

        statuses = " ".join(MONITOR_STACK_STATUSES)
        print("\nMonitor stack deletions with:")
        print(
            f"  aws cloudformation list-stacks --region {self.region} "
            f"--stack-status-filter {statuses} "
            "--query 'StackSummaries[].[StackName,StackStatus]' --output table"
        )

    def run(
        self,
        stack_name: Optional[str] = None,
        confirm: Callable[[str], str] = input,
        assume_yes: bool = False,
    ) -> int:
        """Resolve the target stacks and delete them.

        Args:
            stack_name: Delete only this stack, without prompting.
            confirm: Prompt function used for the per-stack y/N question.
            assume_yes: Answer yes to every prompt.

        Returns:
            int: Process exit code. 1 only when a named stack does not exist.
        """
        print(f"Region: {self.region}")
        if self.dry_run:
            print("DRY RUN MODE: No resources will be deleted")
        print()

        if stack_name:
            exit_code = self._run_named(stack_name)
            if exit_code:
                return exit_code
        else:
            exit_code = self._run_interactive(confirm, assume_yes)
            if exit_code is not None:
                return exit_code

        self._print_summary()
        return 0


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Empty S3 buckets, delete S3 Tables resources and delete "
        "the CloudFormation stacks that own them"
    )
    parser.add_argument(
        "region",
        nargs="?",
        default=DEFAULT_REGION,
        help=f"AWS region (default: {DEFAULT_REGION})",
    )
    parser.add_argument(
        "stack_name",
        nargs="?",
        help="CloudFormation stack to delete. If omitted, every stack is listed "
        "and you are asked about each one",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be deleted without actually deleting",
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Skip the per-stack confirmation prompt (use with caution)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    cleanup = StackCleanup(region=args.region, dry_run=args.dry_run)
    sys.exit(cleanup.run(stack_name=args.stack_name, assume_yes=args.yes))


if __name__ == "__main__":
    main()
