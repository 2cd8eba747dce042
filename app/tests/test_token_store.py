import unittest
from unittest.mock import MagicMock

import requests
from redis import RedisError
from requests.exceptions import ConnectionError, ReadTimeout

from core.api.config import APIConfig
from core.error.exceptions import (InvalidInputException,
                                   MissingCredentialException,
                                   StorageException, UnreachableException)
from core.state.persistence.redis_operations import RedisTokenStorage
from core.state.token_store import CredentialStore, TokenValidity
from tests.helpers import MemoryTokenStorage, make_response


class TestCredentialStore(unittest.TestCase):
    def setUp(self):
        self.storage = MemoryTokenStorage()
        self.session = MagicMock(spec=requests.Session)
        self.store = CredentialStore(
            self.storage,
            api_config=APIConfig(base_url="http://api.test/api"),
            session=self.session
        )

    def test_get_returns_empty_when_unset(self):
        self.assertEqual(self.store.get(), "")
        self.assertFalse(self.store.has_token)

    def test_set_trims_and_persists(self):
        self.store.set("  abc123 \n")
        self.assertEqual(self.store.get(), "abc123")
        self.assertEqual(self.storage.token, "abc123")

    def test_set_rejects_blank_token(self):
        for value in ("", "   ", None):
            with self.subTest(value=value):
                with self.assertRaises(InvalidInputException):
                    self.store.set(value)
        self.assertEqual(self.storage.saves, [])

    def test_token_survives_reload(self):
        self.store.set("persisted")
        reloaded = CredentialStore(self.storage)
        self.assertEqual(reloaded.get(), "persisted")

    def test_clear(self):
        self.store.set("abc")
        self.store.clear()
        self.assertEqual(self.store.get(), "")
        self.assertIsNone(self.storage.token)
        self.assertEqual(CredentialStore(self.storage).get(), "")

    def test_require(self):
        with self.assertRaises(MissingCredentialException):
            self.store.require("member.list")
        self.store.set("abc")
        self.assertEqual(self.store.require(), "abc")

    def test_probe_valid(self):
        self.session.request.return_value = make_response(200, {"success": True, "data": {}})

        self.assertIs(self.store.test("candidate"), TokenValidity.VALID)

        args, kwargs = self.session.request.call_args
        self.assertEqual(args, ("GET", "http://api.test/api/member/list"))
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer candidate")

    def test_probe_does_not_persist(self):
        self.session.request.return_value = make_response(200, {"success": True})
        self.store.test("candidate")
        self.assertEqual(self.store.get(), "")
        self.assertEqual(self.storage.saves, [])

    def test_probe_non_success_status_is_invalid(self):
        for status in (400, 401, 403, 404, 500, 502):
            with self.subTest(status=status):
                self.session.request.return_value = make_response(status, {"success": False})
                self.assertIs(self.store.test("candidate"), TokenValidity.INVALID)

    def test_probe_network_failure_is_unreachable(self):
        for error in (ConnectionError("refused"), ReadTimeout("slow")):
            with self.subTest(error=type(error).__name__):
                self.session.request.reset_mock()
                self.session.request.side_effect = error
                with self.assertRaises(UnreachableException):
                    self.store.test("candidate")
                self.assertEqual(self.session.request.call_count, 1)

    def test_probe_defaults_to_stored_token(self):
        self.store.set("stored")
        self.session.request.return_value = make_response(200, {"success": True})
        self.store.test()
        headers = self.session.request.call_args.kwargs["headers"]
        self.assertEqual(headers["Authorization"], "Bearer stored")

    def test_probe_without_token(self):
        with self.assertRaises(InvalidInputException):
            self.store.test("  ")
        self.session.request.assert_not_called()


class TestRedisTokenStorage(unittest.TestCase):
    def setUp(self):
        self.redis = MagicMock()
        self.storage = RedisTokenStorage(self.redis, "bank-adapter-token")

    def test_save_has_no_expiry(self):
        self.storage.save("abc")
        self.redis.set.assert_called_once_with("bank-adapter-token", "abc")

    def test_load(self):
        self.redis.get.return_value = "abc"
        self.assertEqual(self.storage.load(), "abc")
        self.redis.get.return_value = b"raw"
        self.assertEqual(self.storage.load(), "raw")
        self.redis.get.return_value = None
        self.assertIsNone(self.storage.load())

    def test_delete(self):
        self.storage.delete()
        self.redis.delete.assert_called_once_with("bank-adapter-token")

    def test_redis_errors_become_storage_errors(self):
        self.redis.get.side_effect = RedisError("down")
        self.redis.set.side_effect = RedisError("down")
        with self.assertRaises(StorageException):
            self.storage.load()
        with self.assertRaises(StorageException):
            self.storage.save("abc")


if __name__ == '__main__':
    unittest.main()
