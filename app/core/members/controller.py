"""Member list controller

Owns the single (page, limit, search) query and the view state derived from
the backend's answer. Every user transition issues at most one list request:

- search edits are debounced and always restart at page 1
- page changes are clamped to [1, last page], and a response reporting a
  last page below the current one is followed by one request for that page
- page size changes restart at page 1
- successful mutations reload the query that was active before them

List requests run on an executor. A new request supersedes the previous one:
a superseded future that has not started is cancelled, and the result of one
already in flight is discarded when it arrives.
"""
import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Any, Callable, List, Optional

from config.settings import DEFAULT_PAGE_SIZE, PAGE_SIZES, SEARCH_DEBOUNCE
from core.api.api_response import ApiResponse
from core.error.exceptions import (BankAdapterException,
                                   InvalidInputException,
                                   MissingCredentialException)
from core.error.handler import ErrorHandler
from core.messaging.notifier import (LoggingNotifier, Notification,
                                     NotifierInterface)
from core.state.token_store import CredentialStore
from services.bank_adapter.interface import BankAdapterServiceInterface

from .credit import CreditOperation
from .debounce import Debouncer, Scheduler
from .pagination import clamp_page, visible_page_window
from .types import Member, PageQuery, Pagination, Summary

logger = logging.getLogger(__name__)

LOAD_ACTION = "Load members"


@dataclass(frozen=True)
class MemberListState:
    """Snapshot of the list view handed to listeners"""
    query: PageQuery
    search_text: str
    members: List[Member] = field(default_factory=list)
    summary: Summary = field(default_factory=Summary)
    pagination: Optional[Pagination] = None
    loading: bool = False
    error: Optional[Notification] = None

    @property
    def last_page(self) -> int:
        return self.pagination.last_page if self.pagination else 1

    @property
    def visible_pages(self) -> List[int]:
        return visible_page_window(self.query.page, self.last_page)


class MemberListController:
    """Paginated, searchable member list bound to one credential store"""

    def __init__(
        self,
        service: BankAdapterServiceInterface,
        credentials: CredentialStore,
        notifier: Optional[NotifierInterface] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        page: int = 1,
        search: str = "",
        debounce: float = SEARCH_DEBOUNCE,
        scheduler: Optional[Scheduler] = None,
        executor: Optional[Executor] = None
    ):
        if page_size not in PAGE_SIZES:
            raise InvalidInputException(f"Page size must be one of {PAGE_SIZES}", "limit")

        self.service = service
        self.credentials = credentials
        self.notifier = notifier or LoggingNotifier()

        self._lock = threading.RLock()
        self._idle = threading.Condition(self._lock)
        self._listeners: List[Callable[[MemberListState], None]] = []

        search = (search or "").strip()
        # Clamped against the server's last page once it answers
        self._query = PageQuery(page=max(1, page), limit=page_size, search=search)
        self._search_text = search
        self._members: List[Member] = []
        self._summary = Summary()
        self._pagination: Optional[Pagination] = None
        self._loading = False
        self._error: Optional[Notification] = None

        self._generation = 0
        self._future: Optional[Future] = None

        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="member-list"
        )
        self._debouncer = Debouncer(debounce, self._run_search, scheduler)

    # State

    @property
    def state(self) -> MemberListState:
        with self._lock:
            return MemberListState(
                query=self._query,
                search_text=self._search_text,
                members=list(self._members),
                summary=self._summary,
                pagination=self._pagination,
                loading=self._loading,
                error=self._error,
            )

    @property
    def query(self) -> PageQuery:
        with self._lock:
            return self._query

    @property
    def last_page(self) -> int:
        return self.state.last_page

    @property
    def visible_pages(self) -> List[int]:
        return self.state.visible_pages

    def subscribe(self, listener: Callable[[MemberListState], None]) -> Callable[[], None]:
        """Register a state listener

        Returns:
            Callable that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        snapshot = self.state
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(snapshot)

    def _notify(self, notification: Notification) -> None:
        self.notifier.notify(notification)

    # Transitions

    def load(self) -> Optional[Future]:
        """Initial load of the current query"""
        return self._dispatch(self.query)

    def reload(self) -> Optional[Future]:
        """Re-issue the current query"""
        return self._dispatch(self.query)

    def set_search(self, text: str) -> None:
        """Record a search edit and (re)arm the debounce timer"""
        with self._lock:
            self._search_text = text or ""
        self._publish()
        self._debouncer.trigger()

    def flush_search(self) -> bool:
        """Run a pending debounced search immediately"""
        return self._debouncer.flush()

    def _run_search(self) -> None:
        with self._lock:
            query = replace(self._query, page=1, search=self._search_text.strip())
        self._dispatch(query)

    def go_to_page(self, page: int) -> Optional[Future]:
        """Show a page, clamped to [1, last page]"""
        with self._lock:
            target = clamp_page(page, self.state.last_page)
            query = replace(self._query, page=target)
        return self._dispatch(query)

    def go_to_first(self) -> Optional[Future]:
        return self.go_to_page(1)

    def go_to_last(self) -> Optional[Future]:
        return self.go_to_page(self.last_page)

    def next_page(self) -> Optional[Future]:
        return self.go_to_page(self.query.page + 1)

    def previous_page(self) -> Optional[Future]:
        return self.go_to_page(self.query.page - 1)

    def set_page_size(self, limit: int) -> Optional[Future]:
        """Change the page size and restart at page 1"""
        if limit not in PAGE_SIZES:
            self._notify(ErrorHandler.to_notification(
                InvalidInputException(f"Page size must be one of {PAGE_SIZES}", "limit")
            ))
            return None
        with self._lock:
            query = replace(self._query, page=1, limit=limit)
        return self._dispatch(query)

    # Requests

    def _dispatch(self, query: PageQuery) -> Optional[Future]:
        """Issue one list request for query, superseding any earlier one"""
        with self._lock:
            self._query = query
            if self._future is not None and not self._future.done():
                self._future.cancel()

            if not self.credentials.has_token:
                # Invalidate anything still in flight
                self._generation += 1
                self._loading = False
                self._idle.notify_all()
                self._error = ErrorHandler.to_notification(
                    MissingCredentialException(action="list members"), LOAD_ACTION
                )
                error = self._error
                future = None
            else:
                self._generation += 1
                generation = self._generation
                self._loading = True
                self._error = None
                error = None
                future = self._executor.submit(
                    self.service.list_members, query.page, query.limit, query.search
                )
                self._future = future
                logger.debug(f"Dispatched list request #{generation}: {query}")

        if error is not None:
            self._notify(error)
            self._publish()
            return None

        self._publish()
        future.add_done_callback(lambda f: self._on_loaded(generation, f))
        return future

    def _on_loaded(self, generation: int, future: Future) -> None:
        if future.cancelled():
            logger.debug(f"List request #{generation} cancelled")
            return

        notification = None
        clamped = None
        with self._lock:
            if generation != self._generation:
                logger.debug(f"Discarding stale list response #{generation}")
                return

            error = future.exception()
            if error is None:
                page = future.result()
                last_page = page.pagination.last_page
                if self._query.page > last_page:
                    # Rows went away since the page was chosen
                    clamped = replace(self._query, page=last_page)
                else:
                    self._members = page.members
                    self._summary = page.summary
                    self._pagination = page.pagination
            elif isinstance(error, BankAdapterException):
                notification = ErrorHandler.to_notification(error, LOAD_ACTION)
            else:
                logger.error(f"Unexpected error loading members: {error}", exc_info=error)
                notification = Notification.error(f"{LOAD_ACTION}: Unexpected error.")

            if clamped is None:
                self._loading = False
                self._error = notification
                self._idle.notify_all()

        if clamped is not None:
            logger.debug(f"List response #{generation} is past the last page, loading {clamped}")
            self._dispatch(clamped)
            return

        if notification is not None:
            self._notify(notification)
        self._publish()

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until the latest list request has settled

        Returns:
            bool: False if the timeout expired first
        """
        with self._idle:
            return self._idle.wait_for(lambda: not self._loading, timeout)

    # Mutations

    def _mutate(
        self,
        action: str,
        success_message: str,
        operation: Callable[..., ApiResponse],
        *args: Any,
        **kwargs: Any
    ) -> bool:
        """Run a mutation, notify, and reload the pre-mutation query"""
        query = self.query
        try:
            response = operation(*args, **kwargs)
            response.raise_for_failure()
        except BankAdapterException as e:
            self._notify(ErrorHandler.to_notification(e, action))
            return False

        self._notify(Notification.success(success_message))
        self._dispatch(query)
        return True

    def delete_member(self, member_id: str) -> bool:
        return self._mutate(
            "Delete member", "Member deleted",
            self.service.delete_member, member_id
        )

    def add_credit(self, member_id: str, phone: str, amount: Any, remarks: Optional[str] = None) -> bool:
        return self._mutate(
            "Add credit", "Credit added",
            self.service.add_credit, member_id, phone, amount, remarks
        )

    def remove_credit(self, member_id: str, amount: Any, remarks: Optional[str] = None) -> bool:
        return self._mutate(
            "Remove credit", "Credit removed",
            self.service.remove_credit, member_id, amount, remarks
        )

    def cashout_credit(self, member_id: str, remarks: Optional[str] = None) -> bool:
        return self._mutate(
            "Cash out", "All credit cashed out",
            self.service.cashout_credit, member_id, remarks
        )

    def deposit(
        self,
        phone: str,
        amount: Any,
        currency: str,
        bank_name: str,
        date_deposit: str,
        time_deposit: str,
        member_id: Optional[str] = None
    ) -> bool:
        return self._mutate(
            "Deposit", "Deposit recorded",
            self.service.deposit,
            phone, amount, currency, bank_name, date_deposit, time_deposit,
            member_id=member_id
        )

    def apply_credit(self, operation: CreditOperation, member: Member, **fields: Any) -> bool:
        """Run a credit operation for a member row"""
        if operation is CreditOperation.ADD:
            return self.add_credit(
                member.id, fields.get("phone") or member.username,
                fields.get("amount"), fields.get("remarks")
            )
        if operation is CreditOperation.REMOVE:
            return self.remove_credit(member.id, fields.get("amount"), fields.get("remarks"))
        if operation is CreditOperation.CASHOUT:
            return self.cashout_credit(member.id, fields.get("remarks"))
        return self.deposit(
            fields.get("phone") or member.username,
            fields.get("amount"),
            fields.get("currency") or member.currency,
            fields.get("bank_name"),
            fields.get("date_deposit"),
            fields.get("time_deposit"),
            member_id=member.id
        )

    def close(self) -> None:
        """Drop pending searches and release the executor"""
        self._debouncer.cancel()
        if self._owns_executor:
            self._executor.shutdown(wait=False)
