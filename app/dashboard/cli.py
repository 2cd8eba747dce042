#!/usr/bin/env python3
"""Member admin command line client."""
import argparse
import sys
from dataclasses import dataclass
from typing import Callable, List, Optional

from config.settings import PAGE_SIZES, Settings, configure_logging
from core.api.config import APIConfig
from core.error.exceptions import BankAdapterException
from core.error.handler import ErrorHandler
from core.members.controller import MemberListController, MemberListState
from core.members.credit import CreditOperation
from core.members.forms import MemberForm, MemberFormData
from core.members.types import Member
from core.messaging.notifier import Notification, NotifierInterface
from core.state.persistence.client import get_redis_client
from core.state.persistence.redis_operations import RedisTokenStorage
from core.state.token_store import CredentialStore, TokenValidity
from core.utils.formatting import format_currency, format_date
from services.bank_adapter.service import BankAdapterService


class ConsoleNotifier(NotifierInterface):
    """Print notifications, errors to stderr"""

    def notify(self, notification: Notification) -> None:
        if notification.is_error:
            print(f"[error] {notification.message}", file=sys.stderr)
        else:
            print(f"[{notification.level.value}] {notification.message}")


@dataclass
class Client:
    """Wired-up collaborators for one CLI run"""
    settings: Settings
    credentials: CredentialStore
    service: BankAdapterService
    notifier: ConsoleNotifier

    def controller(
        self,
        page_size: Optional[int] = None,
        page: int = 1,
        search: str = ""
    ) -> MemberListController:
        return MemberListController(
            self.service,
            self.credentials,
            notifier=self.notifier,
            page_size=page_size or self.settings.default_page_size,
            page=page,
            search=search,
            debounce=self.settings.search_debounce,
        )


def build_client(settings: Optional[Settings] = None) -> Client:
    """Create the credential store and service from settings"""
    settings = settings or Settings.from_env()
    api_config = APIConfig.from_settings(settings)
    storage = RedisTokenStorage(get_redis_client(settings.redis_url), settings.token_storage_key)
    credentials = CredentialStore(storage, api_config=api_config)
    service = BankAdapterService(credentials, config=api_config)
    return Client(settings=settings, credentials=credentials, service=service, notifier=ConsoleNotifier())


def render_member(member: Member) -> str:
    lines = [
        f"ID:        {member.id}",
        f"Name:      {member.name or '-'}",
        f"Username:  {member.username or '-'}",
        f"Phone:     {member.phone or '-'}",
        f"Bank:      {member.bank_code or '-'} {member.bank_account_no or ''}".rstrip(),
        f"Balance:   {format_currency(member.credit_balance, member.currency)}",
        f"Created:   {format_date(member.created_at)}",
    ]
    if member.agent_username:
        lines.append(f"Agent:     {member.agent_username}")
    if member.is_banned:
        lines.append("Status:    banned")
    return "\n".join(lines)


def render_page(state: MemberListState) -> str:
    """Render the list view as plain text"""
    summary = state.summary
    lines = [
        f"Members: {summary.total} total (today: {summary.today}, "
        f"week: {summary.week}, month: {summary.month})",
    ]
    if state.query.search:
        lines.append(f"Search: {state.query.search!r}")

    total_items = state.pagination.total_items if state.pagination else len(state.members)
    lines.append(f"Page {state.query.page} of {state.last_page} ({total_items} matching, {state.query.limit} per page)")
    lines.append("")

    if not state.members:
        lines.append("  (no members)")
    for member in state.members:
        lines.append(
            f"  {member.id:<10} {member.name or '-':<24} @{member.username or '-':<16} "
            f"{member.bank_code or '-':<8} {format_currency(member.credit_balance, member.currency):>20}"
        )

    pages = " ".join(f"[{p}]" if p == state.query.page else str(p) for p in state.visible_pages)
    lines.append("")
    lines.append(f"Pages: {pages}")
    return "\n".join(lines)


# Token commands

def cmd_token(client: Client, args: argparse.Namespace) -> int:
    credentials = client.credentials
    if args.token_action == "set":
        credentials.set(args.value)
        client.notifier.notify(Notification.success("Token saved"))
    elif args.token_action == "show":
        token = credentials.get()
        if not token:
            print("(not set)")
        elif args.reveal:
            print(token)
        else:
            print(f"{token[:4]}{'*' * max(len(token) - 4, 0)}")
    elif args.token_action == "clear":
        credentials.clear()
        client.notifier.notify(Notification.success("Token removed"))
    elif args.token_action == "test":
        if credentials.test(args.value) is TokenValidity.VALID:
            client.notifier.notify(Notification.success("Token is valid"))
        else:
            client.notifier.notify(Notification.error("Token is invalid"))
            return 1
    return 0


# Member commands

def cmd_members_list(client: Client, args: argparse.Namespace) -> int:
    controller = client.controller(page_size=args.limit, page=args.page, search=args.search)
    try:
        controller.load()
        controller.wait_idle()
        state = controller.state
        if state.error is not None:
            return 1
        print(render_page(state))
    finally:
        controller.close()
    return 0


BROWSE_HELP = """Commands:
  n / p        next / previous page
  f / l        first / last page
  g N          go to page N
  s N          page size N ({sizes})
  /TEXT        search (empty '/' clears)
  r            reload
  d ID         delete member
  q            quit""".format(sizes=", ".join(str(s) for s in PAGE_SIZES))


def cmd_members_browse(client: Client, args: argparse.Namespace,
                       read: Callable[[str], str] = input) -> int:
    controller = client.controller()
    try:
        controller.load()
        controller.wait_idle()
        print(BROWSE_HELP)
        while True:
            state = controller.state
            if not state.loading and state.error is None:
                print(render_page(state))
            try:
                line = read("> ").strip()
            except EOFError:
                break

            if not line:
                continue
            if line == "q":
                break
            elif line == "n":
                controller.next_page()
            elif line == "p":
                controller.previous_page()
            elif line == "f":
                controller.go_to_first()
            elif line == "l":
                controller.go_to_last()
            elif line == "r":
                controller.reload()
            elif line.startswith("/"):
                controller.set_search(line[1:])
                controller.flush_search()
            elif line.startswith(("g ", "s ", "d ")):
                command, _, value = line.partition(" ")
                value = value.strip()
                if command == "d":
                    controller.delete_member(value)
                elif not value.isdigit():
                    print(f"Expected a number, got {value!r}")
                    continue
                elif command == "g":
                    controller.go_to_page(int(value))
                else:
                    controller.set_page_size(int(value))
            else:
                print(BROWSE_HELP)
                continue
            controller.wait_idle()
    finally:
        controller.close()
    return 0


def cmd_members_show(client: Client, args: argparse.Namespace) -> int:
    member = client.service.get_member(args.member_id)
    print(render_member(member))
    return 0


def cmd_members_find(client: Client, args: argparse.Namespace) -> int:
    member = client.service.get_member_by_phone(args.phone)
    print(render_member(member))
    return 0


def cmd_members_balance(client: Client, args: argparse.Namespace) -> int:
    balance = client.service.get_balance(args.member_id)
    currency = balance.member.currency if balance.member else None
    print(format_currency(balance.balance, currency))
    return 0


def _form_data_from_args(args: argparse.Namespace, base: MemberFormData) -> MemberFormData:
    for field_name in ("name", "username", "phone", "password", "bank_account_no",
                       "bank_code", "currency", "bcel_one_id", "register_channel_id"):
        value = getattr(args, field_name, None)
        if value is not None:
            setattr(base, field_name, value)
    return base


def cmd_members_save(client: Client, args: argparse.Namespace) -> int:
    member = client.service.get_member(args.member_id) if getattr(args, "member_id", None) else None
    form = MemberForm(client.service, client.credentials, member=member, notifier=client.notifier)
    _form_data_from_args(args, form.data)
    if args.verify and not form.verify_account():
        return 1
    response = form.submit()
    return 0 if response is not None else 1


def cmd_members_verify(client: Client, args: argparse.Namespace) -> int:
    form = MemberForm(client.service, client.credentials, notifier=client.notifier)
    _form_data_from_args(args, form.data)
    if not form.verify_account():
        return 1
    print(form.data.name)
    return 0


def cmd_members_delete(client: Client, args: argparse.Namespace) -> int:
    response = client.service.delete_member(args.member_id)
    response.raise_for_failure("DELETE", "member")
    client.notifier.notify(Notification.success("Member deleted"))
    return 0


# Credit commands

def cmd_credit(client: Client, args: argparse.Namespace) -> int:
    operation = CreditOperation(args.credit_action)
    controller = client.controller()
    try:
        if operation is CreditOperation.DEPOSIT:
            ok = controller.deposit(
                args.phone, args.amount, args.currency, args.bank_name,
                args.date, args.time, member_id=args.member_id
            )
        else:
            member = Member(id=args.member_id, username=getattr(args, "phone", None) or "")
            ok = controller.apply_credit(
                operation, member,
                phone=getattr(args, "phone", None),
                amount=getattr(args, "amount", None),
                remarks=args.remarks,
            )
        # A failed reload is reported but does not undo the operation
        controller.wait_idle()
    finally:
        controller.close()
    return 0 if ok else 1


# Reference data

def cmd_reference(client: Client, args: argparse.Namespace) -> int:
    if args.kind == "groups":
        for group in client.service.list_customer_groups():
            print(group.get("name", group) if isinstance(group, dict) else group)
        return 0

    options = client.service.list_banks() if args.kind == "banks" else client.service.list_currencies()
    for option in options:
        print(f"{option.value:<12} {option.label}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="member-admin",
        description="Bank adapter member admin",
        epilog="""
Examples:
  # Store and check the API token
  %(prog)s token set eyJhbGciOi...
  %(prog)s token test

  # Search members
  %(prog)s members list --search john --limit 20

  # Record a deposit made yesterday afternoon
  %(prog)s credit deposit --phone 2055512345 --amount 50000 --currency LAK \\
      --bank-name BCEL --date 2024-01-15 --time 14:30
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    commands = parser.add_subparsers(dest="command", required=True)

    # token
    token = commands.add_parser("token", help="Manage the API token")
    token_actions = token.add_subparsers(dest="token_action", required=True)
    token_set = token_actions.add_parser("set", help="Store a token")
    token_set.add_argument("value")
    token_show = token_actions.add_parser("show", help="Show the stored token")
    token_show.add_argument("--reveal", action="store_true", help="Print the full token")
    token_actions.add_parser("clear", help="Remove the stored token")
    token_test = token_actions.add_parser("test", help="Check a token against the API")
    token_test.add_argument("value", nargs="?", help="Token to test (default: stored token)")
    token.set_defaults(handler=cmd_token)

    # members
    members = commands.add_parser("members", help="Member operations")
    member_actions = members.add_subparsers(dest="member_action", required=True)

    list_parser = member_actions.add_parser("list", help="List members")
    list_parser.add_argument("--page", type=int, default=1)
    list_parser.add_argument("--limit", type=int, choices=PAGE_SIZES, default=None)
    list_parser.add_argument("--search", default="")
    list_parser.set_defaults(handler=cmd_members_list)

    browse = member_actions.add_parser("browse", help="Interactive member list")
    browse.set_defaults(handler=cmd_members_browse)

    show = member_actions.add_parser("show", help="Show a member")
    show.add_argument("member_id")
    show.set_defaults(handler=cmd_members_show)

    find = member_actions.add_parser("find", help="Find a member by phone")
    find.add_argument("phone")
    find.set_defaults(handler=cmd_members_find)

    balance = member_actions.add_parser("balance", help="Fetch a member's balance")
    balance.add_argument("member_id")
    balance.set_defaults(handler=cmd_members_balance)

    def add_member_fields(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--name")
        sub.add_argument("--username")
        sub.add_argument("--phone")
        sub.add_argument("--password")
        sub.add_argument("--bank-account-no", dest="bank_account_no")
        sub.add_argument("--bank-code", dest="bank_code")
        sub.add_argument("--currency")
        sub.add_argument("--bcel-one-id", dest="bcel_one_id")
        sub.add_argument("--register-channel-id", dest="register_channel_id")
        sub.add_argument("--verify", action="store_true",
                         help="Verify the bank account and use the holder name")

    create = member_actions.add_parser("create", help="Create a member")
    add_member_fields(create)
    create.set_defaults(handler=cmd_members_save)

    update = member_actions.add_parser("update", help="Update a member")
    update.add_argument("member_id")
    add_member_fields(update)
    update.set_defaults(handler=cmd_members_save)

    delete = member_actions.add_parser("delete", help="Delete a member")
    delete.add_argument("member_id")
    delete.set_defaults(handler=cmd_members_delete)

    verify = member_actions.add_parser("verify-account", help="Resolve a bank account holder")
    verify.add_argument("--username", required=True, help="Member phone / login")
    verify.add_argument("--bank-account-no", dest="bank_account_no", required=True)
    verify.add_argument("--bank-code", dest="bank_code", required=True)
    verify.add_argument("--currency", default="LAK")
    verify.set_defaults(handler=cmd_members_verify)

    # credit
    credit = commands.add_parser("credit", help="Credit operations")
    credit_actions = credit.add_subparsers(dest="credit_action", required=True)

    add = credit_actions.add_parser("add", help="Add credit")
    add.add_argument("member_id")
    add.add_argument("--phone", required=True)
    add.add_argument("--amount", required=True)
    add.add_argument("--remarks")

    remove = credit_actions.add_parser("remove", help="Remove credit")
    remove.add_argument("member_id")
    remove.add_argument("--amount", required=True)
    remove.add_argument("--remarks")

    cashout = credit_actions.add_parser("cashout", help="Cash out all credit")
    cashout.add_argument("member_id")
    cashout.add_argument("--remarks")

    deposit = credit_actions.add_parser("deposit", help="Record a deposit")
    deposit.add_argument("--member-id", dest="member_id")
    deposit.add_argument("--phone", required=True)
    deposit.add_argument("--amount", required=True)
    deposit.add_argument("--currency", default="LAK")
    deposit.add_argument("--bank-name", dest="bank_name", required=True)
    deposit.add_argument("--date", required=True, help="Deposit date, YYYY-MM-DD")
    deposit.add_argument("--time", required=True, help="Deposit time, HH:MM[:SS] local")
    credit.set_defaults(handler=cmd_credit)

    # reference
    reference = commands.add_parser("reference", help="Reference data")
    reference.add_argument("kind", choices=["banks", "currencies", "groups"])
    reference.set_defaults(handler=cmd_reference)

    return parser


def main(argv: Optional[List[str]] = None, client: Optional[Client] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging()

    try:
        client = client or build_client()
        status = args.handler(client, args)
    except BankAdapterException as e:
        notification = ErrorHandler.to_notification(e)
        print(f"[error] {notification.message}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130

    return status


if __name__ == "__main__":
    sys.exit(main())
