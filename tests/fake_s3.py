from datetime import datetime, timezone

from botocore.exceptions import ClientError


def not_found_error(operation="HeadObject"):
    return ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, operation)


def throttling_error(operation="ListObjectsV2"):
    return ClientError({"Error": {"Code": "SlowDown", "Message": "Please reduce your request rate"}}, operation)


DEFAULT_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeS3Client:
    """In-memory bucket answering the subset of the S3 API the sweeper uses."""

    def __init__(self, objects=None, page_size=1000, list_errors=None, head_errors=None, delete_errors=None):
        # key -> (size, last_modified)
        self.objects = {}
        for key, value in (objects or {}).items():
            if isinstance(value, tuple):
                self.objects[key] = value
            else:
                self.objects[key] = (value, DEFAULT_TIME)
        self.page_size = page_size
        self.list_errors = list_errors or {}
        self.head_errors = head_errors or {}
        self.delete_errors = delete_errors or {}
        self.list_objects_kwargs = []
        self.head_object_calls = []
        self.delete_object_calls = []

    def list_objects_v2(self, **kwargs):
        self.list_objects_kwargs.append(kwargs)
        prefix = kwargs.get("Prefix", "")
        error = self.list_errors.get(prefix)
        if isinstance(error, Exception):
            raise error
        delimiter = kwargs.get("Delimiter")
        max_keys = min(kwargs.get("MaxKeys", 1000), self.page_size)

        entries = []
        seen = set()
        for key in sorted(self.objects):
            if not key.startswith(prefix):
                continue
            rest = key[len(prefix):]
            if delimiter and delimiter in rest:
                common = prefix + rest[: rest.index(delimiter) + len(delimiter)]
                if common not in seen:
                    seen.add(common)
                    entries.append(("prefix", common))
                continue
            entries.append(("object", key))

        start_after = kwargs.get("ContinuationToken")
        if start_after:
            entries = [entry for entry in entries if entry[1] > start_after]
        page = entries[:max_keys]
        truncated = max_keys < len(entries)
        response = {
            "Contents": [
                {"Key": key, "Size": self.objects[key][0], "LastModified": self.objects[key][1]}
                for kind, key in page
                if kind == "object"
            ],
            "CommonPrefixes": [{"Prefix": key} for kind, key in page if kind == "prefix"],
            "IsTruncated": truncated,
        }
        if truncated:
            response["NextContinuationToken"] = page[-1][1]
        return response

    def head_object(self, **kwargs):
        key = kwargs["Key"]
        self.head_object_calls.append(key)
        error = self.head_errors.get(key)
        if isinstance(error, Exception):
            raise error
        if key not in self.objects:
            raise not_found_error()
        size, last_modified = self.objects[key]
        return {"ContentLength": size, "LastModified": last_modified}

    def delete_object(self, **kwargs):
        key = kwargs["Key"]
        self.delete_object_calls.append(key)
        error = self.delete_errors.get(key)
        if isinstance(error, Exception):
            raise error
        self.objects.pop(key, None)
        return {}
