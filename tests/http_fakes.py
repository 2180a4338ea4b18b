from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

import requests


@dataclass(slots=True)
class FakeResponse:
    status_code: int = 200
    json_data: object = None
    headers: dict | None = None
    invalid_json: bool = False

    def json(self) -> object:
        if self.invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return {} if self.json_data is None else self.json_data

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


@dataclass(slots=True)
class CapturedCall:
    url: str
    kwargs: dict = field(default_factory=dict)


def make_fake_get(
    responses: Iterable[FakeResponse | BaseException],
    *,
    captured: list[CapturedCall] | None = None,
) -> Callable[..., FakeResponse]:
    """Return a ``requests.get`` stand-in that replays responses or raises errors."""
    queue = list(responses)

    def _fake_get(url: str, *_args, **kwargs) -> FakeResponse:
        if captured is not None:
            captured.append(CapturedCall(url=url, kwargs=kwargs))
        item = queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    return _fake_get
