from __future__ import annotations
"""Thin object store layer over a boto3 S3 client."""
import logging
from typing import Callable, Iterator

import boto3
from botocore.client import Config
from botocore.exceptions import ClientError

from .models import NOT_FOUND, ListedEntry, ListedObject, ListedPrefix, ObjectProperties, PropertyLookup


PAGE_SIZE = 1000
NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})

LOGGER = logging.getLogger(__name__)


def is_not_found(exc: ClientError) -> bool:
    error = exc.response.get("Error", {}) if exc.response else {}
    return str(error.get("Code", "")) in NOT_FOUND_CODES


class ObjectStoreService:
    """Hierarchical listing, lookup and delete for a single bucket."""

    def __init__(
        self,
        bucket_name: str,
        *,
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        client_factory: Callable[..., object] | None = None,
        page_size: int = PAGE_SIZE,
    ):
        self._bucket_name = bucket_name
        self._client_factory = client_factory or boto3.client
        self._page_size = max(int(page_size), 1)
        self._client = self._create_client(endpoint_url, access_key, secret_key)

    @property
    def bucket_name(self) -> str:
        return self._bucket_name

    def _create_client(self, endpoint_url: str | None, access_key: str | None, secret_key: str | None):
        config = Config(signature_version="s3v4")
        kwargs: dict[str, object] = {"config": config}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        # Without explicit keys boto3 falls back to its default credential chain.
        if access_key and secret_key:
            kwargs["aws_access_key_id"] = access_key
            kwargs["aws_secret_access_key"] = secret_key
        return self._client_factory("s3", **kwargs)

    def list_hierarchical(self, prefix: str = "", delimiter: str = "/") -> Iterator[ListedEntry]:
        """Yield the sub-prefixes and direct objects one level below ``prefix``.

        Pages are fetched lazily. Iteration cannot be resumed; call again to
        re-list from scratch.

        Raises:
            BotoCoreError | ClientError: when a page cannot be listed.
        """
        request_token: str | None = None
        page_number = 1

        while True:
            list_params = {"Bucket": self._bucket_name, "MaxKeys": self._page_size}
            if prefix:
                list_params["Prefix"] = prefix
            if delimiter:
                list_params["Delimiter"] = delimiter
            if request_token:
                list_params["ContinuationToken"] = request_token

            response = self._client.list_objects_v2(**list_params)
            prefixes = response.get("CommonPrefixes", [])
            contents = response.get("Contents", [])
            LOGGER.debug(
                "Listed page %d of '%s' (%d prefix(es), %d object(s))",
                page_number,
                prefix,
                len(prefixes),
                len(contents),
            )
            for common in prefixes:
                yield ListedPrefix(path=common["Prefix"])
            for obj in contents:
                yield ListedObject(
                    name=obj["Key"],
                    size=int(obj.get("Size") or 0),
                    last_modified=obj.get("LastModified"),
                )

            response_token = response.get("NextContinuationToken")
            if not (response.get("IsTruncated", False) and response_token):
                break
            request_token = response_token
            page_number += 1

    def get_properties(self, name: str) -> PropertyLookup:
        """Return the object's properties, or ``NOT_FOUND`` when it does not exist."""

        try:
            response = self._client.head_object(Bucket=self._bucket_name, Key=name)
        except ClientError as exc:
            if is_not_found(exc):
                LOGGER.debug("No object named '%s'", name)
                return NOT_FOUND
            raise
        return ObjectProperties(
            name=name,
            size=int(response.get("ContentLength") or 0),
            last_modified=response.get("LastModified"),
        )

    def delete_if_exists(self, name: str) -> bool:
        """Delete ``name``; deleting an absent object is a successful no-op.

        Returns False only when the store answers with a not-found error.
        S3 itself acknowledges deletes of missing keys, so True does not mean
        the object existed.
        """

        try:
            self._client.delete_object(Bucket=self._bucket_name, Key=name)
        except ClientError as exc:
            if is_not_found(exc):
                return False
            raise
        return True
