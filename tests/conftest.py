"""Test configuration and fixtures for s3glob."""

import asyncio
import copy

import pytest


class FakeListingClient:
    """Listing client returning canned pages and recording every request.

    Pages are handed out in order; once only one is left it is returned for
    every further call.
    """

    def __init__(self, pages=None, error=None):
        self.pages = list(pages or [{"IsTruncated": False, "Contents": []}])
        self.error = error
        self.calls = []

    def _next_page(self, params):
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        page = self.pages.pop(0) if len(self.pages) > 1 else self.pages[0]
        return copy.deepcopy(page)

    def list_objects(self, **params):
        return self._next_page(params)


class AsyncFakeListingClient(FakeListingClient):
    """Coroutine flavoured client that yields to the loop on every call."""

    def __init__(self, pages=None, error=None):
        super().__init__(pages, error)
        self.in_flight = 0
        self.max_in_flight = 0

    async def list_objects(self, **params):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0.01)
            return self._next_page(params)
        finally:
            self.in_flight -= 1


def page(*keys, truncated=False, next_marker=None):
    """Build a list_objects response for the given keys."""
    result = {
        "IsTruncated": truncated,
        "Contents": [{"Key": key, "Size": len(key)} for key in keys],
    }
    if next_marker is not None:
        result["NextMarker"] = next_marker
    return result


@pytest.fixture
def fake_client():
    """A listing client with a single empty, final page."""
    return FakeListingClient()


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake credentials so boto3 never looks for real ones."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "test_key")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "test_secret")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
