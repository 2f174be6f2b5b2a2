import os, sys
from io import BytesIO

import boto3
import pytest
from moto import mock_aws
from PIL import Image

# Ensure project root on sys.path so `import catalog...` works
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from catalog.core.config import settings


def image_bytes(size=(50, 50), fmt="PNG", color=(0, 128, 255)) -> bytes:
    img = Image.new("RGB", size, color=color)
    buf = BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def aws_mock(monkeypatch, tmp_path):
    with mock_aws():
        # Route boto3 to moto (no endpoint), use test resources
        monkeypatch.setattr(settings, "aws_endpoint_url", None)
        monkeypatch.setattr(settings, "aws_region", "us-east-1")
        monkeypatch.setattr(settings, "products_table", "Products")
        monkeypatch.setattr(settings, "tags_table", "Tags")
        monkeypatch.setattr(settings, "public_dir", str(tmp_path / "public"))

        dynamodb = boto3.client("dynamodb", region_name=settings.aws_region)
        for name in (settings.products_table, settings.tags_table):
            dynamodb.create_table(
                TableName=name,
                AttributeDefinitions=[{"AttributeName": "id", "AttributeType": "S"}],
                KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
                BillingMode="PAY_PER_REQUEST",
            )
        yield
