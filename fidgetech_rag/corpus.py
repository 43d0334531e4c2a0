"""Document stores the ingestion pipeline reads from.

Only plain-text objects (``.txt`` and ``.md``) are listed; everything else is
filtered out before it can reach the chunker.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from fidgetech_rag.errors import CorpusUnavailableError, DocumentReadError

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = (".txt", ".md")


@dataclass(frozen=True)
class Document:
    name: str
    text: str


def is_text_document(name: str) -> bool:
    return name.lower().endswith(TEXT_EXTENSIONS)


def decode_document(name: str, content: bytes) -> Document:
    try:
        return Document(name=name, text=content.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise DocumentReadError(f"Document {name} is not valid UTF-8: {e}", name) from e


class CorpusLoader:
    """Interface for a document store.

    ``list_documents`` failing means the corpus is unreachable and must raise
    CorpusUnavailableError. ``load`` failing for one document must raise
    DocumentReadError so the caller can skip it.
    """

    def describe(self) -> str:
        raise NotImplementedError

    def list_documents(self) -> List[str]:
        raise NotImplementedError

    def load(self, name: str) -> Document:
        raise NotImplementedError


class BucketCorpusLoader(CorpusLoader):
    """Reads documents from an S3-compatible bucket.

    The default endpoint is the Google Cloud Storage XML API, which accepts
    HMAC keys through the S3 protocol. Without explicit keys boto3 falls back
    to its usual credential chain.
    """

    def __init__(
        self,
        bucket: str,
        *,
        endpoint_url: Optional[str] = "https://storage.googleapis.com",
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        region: str = "auto",
        timeout: float = 30.0,
        client=None,
    ):
        if not bucket:
            raise ValueError("bucket is required")
        self.bucket = bucket
        self.endpoint_url = endpoint_url
        if client is None:
            client = boto3.client(
                "s3",
                endpoint_url=endpoint_url or None,
                aws_access_key_id=access_key_id,
                aws_secret_access_key=secret_access_key,
                region_name=region,
                config=Config(
                    signature_version="s3v4",
                    connect_timeout=timeout,
                    read_timeout=timeout,
                    retries={"max_attempts": 3},
                ),
            )
        self._client = client

    def describe(self) -> str:
        return f"bucket {self.bucket} at {self.endpoint_url or 'default endpoint'}"

    def list_documents(self) -> List[str]:
        names: List[str] = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket):
                for obj in page.get("Contents", []):
                    key = obj.get("Key", "")
                    if is_text_document(key):
                        names.append(key)
        except (ClientError, BotoCoreError) as e:
            raise CorpusUnavailableError(
                f"Failed to list documents in bucket {self.bucket}: {e}",
                {"bucket": self.bucket, "endpoint": self.endpoint_url},
            ) from e
        return names

    def load(self, name: str) -> Document:
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=name)
            content = response["Body"].read()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            if code in ("404", "NoSuchKey"):
                raise DocumentReadError(f"Document not found in bucket: {name}", name) from e
            raise DocumentReadError(f"Failed to download {name}: {e}", name) from e
        except BotoCoreError as e:
            raise DocumentReadError(f"Failed to download {name}: {e}", name) from e
        return decode_document(name, content)


class DirectoryCorpusLoader(CorpusLoader):
    """Reads ``.txt``/``.md`` files below a local directory, recursively."""

    def __init__(self, root):
        self.root = Path(root)

    def describe(self) -> str:
        return f"directory {self.root}"

    def list_documents(self) -> List[str]:
        if not self.root.is_dir():
            raise CorpusUnavailableError(
                f"Corpus directory not found: {self.root}", {"path": str(self.root)}
            )
        return sorted(
            p.relative_to(self.root).as_posix()
            for p in self.root.rglob("*")
            if p.is_file() and is_text_document(p.name)
        )

    def load(self, name: str) -> Document:
        path = self.root / name
        try:
            content = path.read_bytes()
        except OSError as e:
            raise DocumentReadError(f"Failed to read {name}: {e}", name) from e
        return decode_document(name, content)


def loader_from_settings(settings) -> CorpusLoader:
    if settings.corpus_bucket:
        return BucketCorpusLoader(
            settings.corpus_bucket,
            endpoint_url=settings.corpus_endpoint_url,
            access_key_id=settings.corpus_access_key_id,
            secret_access_key=settings.corpus_secret_access_key,
            region=settings.corpus_region,
            timeout=settings.request_timeout,
        )
    return DirectoryCorpusLoader(settings.corpus_dir)
