import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from keyring.errors import KeyringError

from s3_sweeper.profiles import ConnectionProfile, KeychainStore, ProfileStorage
from s3_sweeper.settings import ConfigurationError


class FakeKeychain:
    def __init__(self, secrets=None):
        self.secrets = dict(secrets or {})
        self.lookups = []

    def get_secret(self, profile_name):
        self.lookups.append(profile_name)
        return self.secrets.get(profile_name, "")


def write_profiles(tmp, entries):
    path = Path(tmp) / "connections.json"
    path.write_text(json.dumps(entries), encoding="utf-8")
    return path


class ProfileStorageTests(unittest.TestCase):
    def test_get_reads_secret_from_keychain(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = write_profiles(
                tmp,
                [{"name": "minio", "endpoint_url": "http://localhost:9000", "access_key": "AKIA"}],
            )
            keychain = FakeKeychain({"minio": "s3cr3t"})
            storage = ProfileStorage(path, keychain=keychain)

            profile = storage.get("minio")

            self.assertEqual(
                ConnectionProfile(
                    name="minio",
                    endpoint_url="http://localhost:9000",
                    access_key="AKIA",
                    secret_key="s3cr3t",
                ),
                profile,
            )
            self.assertEqual(["minio"], keychain.lookups)

    def test_get_accepts_plaintext_secret(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = write_profiles(
                tmp,
                [{"name": "aws", "access_key": "AKIA", "secret_key": "inline"}],
            )
            keychain = FakeKeychain()
            storage = ProfileStorage(path, keychain=keychain)

            profile = storage.get("aws")

            self.assertEqual("inline", profile.secret_key)
            self.assertEqual("", profile.endpoint_url)
            self.assertEqual([], keychain.lookups)

    def test_unknown_profile_raises_configuration_error(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = write_profiles(tmp, [{"name": "aws", "access_key": "AKIA"}])
            storage = ProfileStorage(path, keychain=FakeKeychain())

            with self.assertRaises(ConfigurationError):
                storage.get("other")

    def test_missing_secret_raises_configuration_error(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = write_profiles(tmp, [{"name": "aws", "access_key": "AKIA"}])
            storage = ProfileStorage(path, keychain=FakeKeychain())

            with self.assertRaises(ConfigurationError):
                storage.get("aws")

    def test_missing_file_raises_configuration_error(self):
        with tempfile.TemporaryDirectory() as tmp:
            storage = ProfileStorage(Path(tmp) / "missing.json", keychain=FakeKeychain())

            with self.assertRaises(ConfigurationError):
                storage.get("aws")


class KeychainStoreTests(unittest.TestCase):
    def test_get_secret_uses_service_name(self):
        with mock.patch("s3_sweeper.profiles.keyring.get_password", return_value="pw") as get_password:
            secret = KeychainStore(service_name="svc").get_secret("profile")

        self.assertEqual("pw", secret)
        get_password.assert_called_once_with("svc", "profile")

    def test_get_secret_handles_keyring_errors(self):
        with mock.patch("s3_sweeper.profiles.keyring.get_password", side_effect=KeyringError("locked")):
            self.assertEqual("", KeychainStore().get_secret("profile"))

    def test_get_secret_skips_empty_name(self):
        with mock.patch("s3_sweeper.profiles.keyring.get_password") as get_password:
            self.assertEqual("", KeychainStore().get_secret(""))

        get_password.assert_not_called()


if __name__ == "__main__":
    unittest.main()
