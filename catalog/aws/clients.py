import boto3
from ..core.config import settings


def dynamodb():
    """Create a DynamoDB resource using our configured region/endpoint/creds."""
    return boto3.resource(
        "dynamodb",
        region_name=settings.aws_region,
        endpoint_url=settings.aws_endpoint_url,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
    )


def products_table():
    """Return a DynamoDB Table handle for the configured products table."""
    return dynamodb().Table(settings.products_table)


def tags_table():
    return dynamodb().Table(settings.tags_table)
