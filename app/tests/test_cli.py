import io
import unittest
from contextlib import redirect_stderr, redirect_stdout
from decimal import Decimal
from unittest.mock import MagicMock, call, patch

from config.settings import Settings
from core.api.api_response import ApiResponse
from core.error.exceptions import NotFoundException, ServerErrorException
from core.members.types import Balance, Member, MemberPage, PageQuery, ReferenceOption
from core.state.token_store import CredentialStore, TokenValidity
from dashboard.cli import (Client, ConsoleNotifier, build_parser,
                           cmd_members_browse, main)
from services.bank_adapter.service import BankAdapterService
from tests.helpers import MemoryTokenStorage, list_body


def member_page(page=1, limit=10, search="", total_items=23):
    rows = [{"id": str(i), "name": f"Member {i}", "username": f"user{i}", "creditBalance": 1000}
            for i in range(min(limit, total_items))]
    data = list_body(rows, total_items, page=page, limit=limit)["data"]["data"]
    return MemberPage.from_data(data, PageQuery(page, limit, search))


class CLITestCase(unittest.TestCase):
    def setUp(self):
        self.storage = MemoryTokenStorage("abcdef")
        self.service = MagicMock(spec=BankAdapterService)
        self.service.list_members.side_effect = lambda page, limit, search: member_page(page, limit, search)
        self.client = Client(
            settings=Settings(
                api_url="http://api.test/api",
                api_timeout=30,
                redis_url="redis://localhost:6379/0",
                token_storage_key="bank-adapter-token",
                default_page_size=10,
                search_debounce=0.5,
            ),
            credentials=CredentialStore(self.storage),
            service=self.service,
            notifier=ConsoleNotifier(),
        )

    def run_cli(self, *argv):
        stdout, stderr = io.StringIO(), io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            status = main(list(argv), client=self.client)
        return status, stdout.getvalue(), stderr.getvalue()


class TestParser(unittest.TestCase):
    def test_page_size_choices(self):
        parser = build_parser()
        self.assertEqual(parser.parse_args(["members", "list", "--limit", "50"]).limit, 50)
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                parser.parse_args(["members", "list", "--limit", "7"])

    def test_deposit_requires_date_and_time(self):
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                build_parser().parse_args(
                    ["credit", "deposit", "--phone", "1", "--amount", "1", "--bank-name", "BCEL"]
                )


class TestTokenCommands(CLITestCase):
    def test_set_trims_and_persists(self):
        status, out, _ = self.run_cli("token", "set", "  new-token  ")
        self.assertEqual(status, 0)
        self.assertEqual(self.storage.token, "new-token")
        self.assertIn("Token saved", out)

    def test_set_empty_token_fails(self):
        status, _, err = self.run_cli("token", "set", "   ")
        self.assertEqual(status, 1)
        self.assertIn("Please enter a token", err)
        self.assertEqual(self.storage.saves, [])

    def test_show_masks_token(self):
        self.assertEqual(self.run_cli("token", "show")[1].strip(), "abcd**")
        self.assertEqual(self.run_cli("token", "show", "--reveal")[1].strip(), "abcdef")

    def test_invalid_token_exits_non_zero(self):
        with patch.object(self.client.credentials, "test", return_value=TokenValidity.INVALID):
            status, _, err = self.run_cli("token", "test")
        self.assertEqual(status, 1)
        self.assertIn("Token is invalid", err)

    def test_valid_token(self):
        with patch.object(self.client.credentials, "test", return_value=TokenValidity.VALID):
            status, out, _ = self.run_cli("token", "test", "other")
        self.assertEqual(status, 0)
        self.assertIn("Token is valid", out)

    def test_clear(self):
        self.run_cli("token", "clear")
        self.assertIsNone(self.storage.token)
        self.assertEqual(self.run_cli("token", "show")[1].strip(), "(not set)")


class TestMemberCommands(CLITestCase):
    def test_list(self):
        status, out, _ = self.run_cli("members", "list")

        self.assertEqual(status, 0)
        self.service.list_members.assert_called_once_with(1, 10, "")
        self.assertIn("Page 1 of 3", out)
        self.assertIn("Pages: [1] 2 3", out)

    def test_list_page_search_and_limit(self):
        self.run_cli("members", "list", "--search", " john ", "--limit", "20", "--page", "2")
        self.assertEqual(
            self.service.list_members.call_args_list,
            [call(2, 20, "john")]
        )

    def test_list_page_is_one_request(self):
        status, out, _ = self.run_cli("members", "list", "--page", "2")
        self.assertEqual(status, 0)
        self.assertEqual(self.service.list_members.call_args_list, [call(2, 10, "")])
        self.assertIn("Page 2 of 3", out)

    def test_list_page_past_the_end_shows_last_page(self):
        status, out, _ = self.run_cli("members", "list", "--page", "9")
        self.assertEqual(status, 0)
        self.assertEqual(
            self.service.list_members.call_args_list,
            [call(9, 10, ""), call(3, 10, "")]
        )
        self.assertIn("Page 3 of 3", out)

    def test_list_without_token(self):
        self.storage.token = None
        self.client.credentials = CredentialStore(self.storage)

        status, out, err = self.run_cli("members", "list")

        self.assertEqual(status, 1)
        self.service.list_members.assert_not_called()
        self.assertIn("Load members: Token is not set. Please set a token first.", err)
        self.assertEqual(out, "")

    def test_show_not_found(self):
        self.service.get_member.side_effect = NotFoundException("Not found", "GET", "member/9", 404)
        status, _, err = self.run_cli("members", "show", "9")
        self.assertEqual(status, 1)
        self.assertEqual(err.strip().splitlines(), ["[error] Record not found."])

    def test_balance(self):
        self.service.get_balance.return_value = Balance(
            member_id="42", balance=Decimal("1500"), member=Member(id="42", currency="USD")
        )
        self.assertEqual(self.run_cli("members", "balance", "42")[1].strip(), "1,500.00 USD")

    def test_delete(self):
        self.service.delete_member.return_value = ApiResponse(success=True, data={})
        status, out, _ = self.run_cli("members", "delete", "42")
        self.assertEqual(status, 0)
        self.assertIn("Member deleted", out)

    def test_create_reports_validation_error(self):
        status, _, err = self.run_cli("members", "create", "--name", "Noy")
        self.assertEqual(status, 1)
        self.service.create_member.assert_not_called()
        self.assertIn("Please enter a username", err)

    def test_browse(self):
        script = iter(["n", "g 9", "s 7", "q"])
        args = build_parser().parse_args(["members", "browse"])

        with redirect_stdout(io.StringIO()) as out, redirect_stderr(io.StringIO()):
            status = cmd_members_browse(self.client, args, read=lambda prompt: next(script))

        self.assertEqual(status, 0)
        self.assertEqual(
            self.service.list_members.call_args_list,
            [call(1, 10, ""), call(2, 10, ""), call(3, 10, "")]
        )
        self.assertIn("Page 3 of 3", out.getvalue())


class TestCreditCommands(CLITestCase):
    def setUp(self):
        super().setUp()
        ok = ApiResponse(success=True, data={})
        for method in ("add_credit", "remove_credit", "cashout_credit", "deposit"):
            getattr(self.service, method).return_value = ok

    def test_add_credit_reloads_list(self):
        status, out, _ = self.run_cli("credit", "add", "42", "--phone", "2055512345", "--amount", "100")

        self.assertEqual(status, 0)
        self.service.add_credit.assert_called_once_with("42", "2055512345", "100", None)
        self.service.list_members.assert_called_once_with(1, 10, "")
        self.assertIn("Credit added", out)

    def test_deposit(self):
        status, _, _ = self.run_cli(
            "credit", "deposit", "--phone", "2055512345", "--amount", "500",
            "--bank-name", "BCEL", "--date", "2024-01-15", "--time", "14:30"
        )
        self.assertEqual(status, 0)
        self.service.deposit.assert_called_once_with(
            "2055512345", "500", "LAK", "BCEL", "2024-01-15", "14:30", member_id=None
        )

    def test_failed_reload_does_not_fail_the_operation(self):
        self.service.list_members.side_effect = ServerErrorException("boom", "GET", "member/list", 500)

        status, out, err = self.run_cli("credit", "add", "42", "--phone", "2055512345", "--amount", "10")

        self.assertEqual(status, 0)
        self.service.add_credit.assert_called_once_with("42", "2055512345", "10", None)
        self.assertIn("Credit added", out)
        self.assertIn("Load members: Server error", err)

    def test_rejected_operation(self):
        self.service.cashout_credit.return_value = ApiResponse(success=False, error="Nothing to cash out")
        status, _, err = self.run_cli("credit", "cashout", "42")
        self.assertEqual(status, 1)
        self.assertIn("Cash out: Nothing to cash out", err)
        self.service.list_members.assert_not_called()


class TestReferenceCommand(CLITestCase):
    def test_banks(self):
        self.service.list_banks.return_value = [ReferenceOption("BCEL", "BCEL One")]
        status, out, _ = self.run_cli("reference", "banks")
        self.assertEqual(status, 0)
        self.assertIn("BCEL", out)
        self.assertIn("BCEL One", out)


if __name__ == '__main__':
    unittest.main()
