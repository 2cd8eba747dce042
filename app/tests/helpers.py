"""Test doubles shared by the test modules"""
import json
from concurrent.futures import Executor, Future
from typing import Any, Callable, List, Optional

import requests

from core.members.debounce import ScheduledCall, Scheduler
from core.messaging.notifier import Notification, NotifierInterface
from core.state.interface import TokenStorageInterface


def make_response(status: int = 200, body: Any = None, text: Optional[str] = None) -> requests.Response:
    """Build a real requests.Response with a JSON or text body"""
    response = requests.Response()
    response.status_code = status
    response.encoding = "utf-8"
    if body is not None:
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = (text or "").encode("utf-8")
        response.headers["Content-Type"] = "text/plain"
    return response


def list_body(members: List[dict], total_items: int, page: int = 1, limit: int = 10,
              nested: bool = True) -> dict:
    """Backend list response, double-wrapped by default"""
    total_pages = -(-total_items // limit)
    data = {
        "members": members,
        "summary": {"today": 1, "week": 2, "month": 3, "total": total_items},
        "pagination": {
            "page": page,
            "limit": limit,
            "totalItems": total_items,
            "totalPages": total_pages,
            "hasNextPage": page < total_pages,
            "hasPrevPage": page > 1,
        },
    }
    return {
        "success": True,
        "data": {"data": data} if nested else data,
        "timestamp": "2024-01-15T07:30:00.000Z",
    }


class MemoryTokenStorage(TokenStorageInterface):
    def __init__(self, token: Optional[str] = None):
        self.token = token
        self.saves = []

    def load(self):
        return self.token

    def save(self, token):
        self.saves.append(token)
        self.token = token

    def delete(self):
        self.token = None


class RecordingNotifier(NotifierInterface):
    def __init__(self):
        self.notifications: List[Notification] = []

    def notify(self, notification):
        self.notifications.append(notification)

    @property
    def errors(self) -> List[str]:
        return [n.message for n in self.notifications if n.is_error]

    @property
    def successes(self) -> List[str]:
        return [n.message for n in self.notifications if not n.is_error]


class ManualCall(ScheduledCall):
    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.fired = True
        self.callback()


class ManualScheduler(Scheduler):
    """Scheduler whose timers only run when the test fires them"""

    def __init__(self):
        self.calls: List[ManualCall] = []

    def schedule(self, delay, callback):
        call = ManualCall(delay, callback)
        self.calls.append(call)
        return call

    @property
    def live_calls(self) -> List[ManualCall]:
        return [c for c in self.calls if not c.cancelled and not c.fired]

    def fire_pending(self):
        for call in self.live_calls:
            call.fire()


class ImmediateExecutor(Executor):
    """Runs submitted work on the calling thread"""

    def submit(self, fn, *args, **kwargs):
        future = Future()
        future.set_running_or_notify_cancel()
        try:
            result = fn(*args, **kwargs)
        except BaseException as e:
            future.set_exception(e)
        else:
            future.set_result(result)
        return future


class ManualExecutor(Executor):
    """Queues submitted work until the test runs it"""

    def __init__(self):
        self.jobs = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.jobs.append((future, fn, args, kwargs))
        return future

    def start(self, index: int) -> bool:
        """Mark a job running so it can no longer be cancelled"""
        return self.jobs[index][0].set_running_or_notify_cancel()

    def finish(self, index: int):
        future, fn, args, kwargs = self.jobs[index]
        if future.cancelled():
            return
        if future.running() is False and not future.done():
            if not future.set_running_or_notify_cancel():
                return
        try:
            result = fn(*args, **kwargs)
        except BaseException as e:
            future.set_exception(e)
        else:
            future.set_result(result)

    def run_all(self):
        for index in range(len(self.jobs)):
            future = self.jobs[index][0]
            if not future.done():
                self.finish(index)
