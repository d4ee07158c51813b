"""LocalStack fixtures: provisioned fieldmap tables and upload bucket."""

from __future__ import annotations

import os
import sys

import boto3
import pytest
from botocore.exceptions import BotoCoreError, ClientError

LOCALSTACK_URL = os.environ.get("LOCALSTACK_URL", "http://localhost:4566")
REGION = "us-east-1"
TABLE_SUFFIX = "-inttest"
BUCKET = "fieldmap-inttest"


def _localstack_session() -> boto3.Session:
    return boto3.Session(region_name=REGION)


def _reachable() -> bool:
    session = _localstack_session()
    try:
        session.client("dynamodb", endpoint_url=LOCALSTACK_URL).list_tables(Limit=1)
        session.client("s3", endpoint_url=LOCALSTACK_URL).list_buckets()
    except (BotoCoreError, ClientError):
        return False
    return True


skip_no_localstack = pytest.mark.skipif(not _reachable(), reason="LocalStack not available")


@pytest.fixture(scope="session")
def provisioned() -> str:
    """Run the provisioning script once per session; returns the table suffix."""
    scripts_dir = os.path.join(os.path.dirname(__file__), "..", "..", "scripts")
    sys.path.insert(0, os.path.abspath(scripts_dir))
    from create_tables import create_bucket, create_tables

    session = _localstack_session()
    create_tables(session.resource("dynamodb", endpoint_url=LOCALSTACK_URL), suffix=TABLE_SUFFIX)
    create_bucket(session.client("s3", endpoint_url=LOCALSTACK_URL), BUCKET)
    return TABLE_SUFFIX
