import io

import pytest
import requests

from api_adapters import DurationEstimator
from api_structures import RouteEstimate, TransportType
from console_ui import ConsoleMap, ConsolePresenter


class FakeResponse:
    def __init__(self, payload=None, status_code=200, reason="OK"):
        self.payload = payload
        self.status_code = status_code
        self.reason = reason

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} {self.reason}")

    def json(self):
        if self.payload is None:
            raise ValueError("No JSON object could be decoded")
        return self.payload


class FakeSession:
    """
    Stands in for requests.Session. Answers are looked up by the Directions
    'mode' param, or by the last URL segment ('price', 'time') for Uber.
    An exception instance as the answer is raised instead.
    """

    def __init__(self, answers):
        self.answers = answers
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        params = params or {}
        self.calls.append({'url': url, 'params': params, 'headers': headers, 'timeout': timeout})
        key = params.get('mode') or url.rsplit('/', 1)[-1]
        answer = self.answers[key]
        if isinstance(answer, Exception):
            raise answer
        return answer


class StubEstimator(DurationEstimator):
    def __init__(self, provider, duration=None, payload=None, error=None):
        self.provider = provider
        self.duration = duration
        self.payload = payload
        self.error = error
        self.calls = []

    async def estimate(self, origin, destination):
        self.calls.append((origin, destination))
        if self.error is not None:
            raise self.error
        return RouteEstimate(self.provider, self.duration, self.payload)


def directions(duration=None, status="OK"):
    """A minimal Directions API response with one route of the given duration."""
    if duration is None:
        return {'status': status, 'routes': []}
    return {
        'status': status,
        'routes': [{'legs': [{
            'duration': {'value': duration, 'text': f"{duration // 60} mins"},
            'start_address': "Maidan Nezalezhnosti",
            'end_address': "Lukianivska",
            'steps': [{}, {}],
        }]}],
    }


@pytest.fixture
def make_directions():
    return directions


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def stub_estimator():
    def make(provider=TransportType.TRANSIT, duration=None, payload=None, error=None):
        return StubEstimator(provider, duration=duration, payload=payload, error=error)
    return make


@pytest.fixture
def console_out():
    return io.StringIO()


@pytest.fixture
def map_view(console_out):
    return ConsoleMap(stream=io.StringIO(), out=console_out)


@pytest.fixture
def presenter(console_out):
    return ConsolePresenter(out=console_out)
