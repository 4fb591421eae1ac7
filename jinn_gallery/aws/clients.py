import boto3
from ..core.config import settings


def _dynamodb():
    return boto3.resource(
        "dynamodb",
        region_name=settings.aws_region,
        endpoint_url=settings.aws_endpoint_url,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
    )


def gallery_table():
    """Return a DynamoDB Table handle for gallery records."""
    return _dynamodb().Table(settings.gallery_table_name)


def users_table():
    """Return a DynamoDB Table handle for users."""
    return _dynamodb().Table(settings.users_table_name)
