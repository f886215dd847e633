import pytest

from gatehouse.domain.auth.value_objects import ThrottleLimit
from gatehouse.domain.errors import InvalidThrottleIdentifierError, ThrottlingError
from gatehouse.infrastructure.throttling.throttler import ThrottlerService


class FakeClock:
    def __init__(self, now_ms: int = 1_000_000) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, seconds: float) -> None:
        self.now_ms += int(seconds * 1000)


@pytest.fixture(name="clock")
def clock_fixture() -> FakeClock:
    return FakeClock()


@pytest.fixture(name="throttler")
def throttler_fixture(clock: FakeClock) -> ThrottlerService:
    return ThrottlerService(ThrottleLimit(ttl=60, limit=2), clock=clock)


async def test_third_request_in_window_is_rejected(throttler):
    await throttler.track_request("10.0.0.1")
    await throttler.track_request("10.0.0.1")

    assert not await throttler.is_allowed("10.0.0.1")
    assert await throttler.get_remaining_requests("10.0.0.1") == 0
    with pytest.raises(ThrottlingError) as exc_info:
        await throttler.track_request("10.0.0.1")
    assert exc_info.value.retry_after == 60
    assert "try again after 60 seconds" in str(exc_info.value)


async def test_reset_restores_full_allowance(throttler):
    await throttler.track_request("10.0.0.1")
    await throttler.track_request("10.0.0.1")
    await throttler.reset_throttling("10.0.0.1")

    assert await throttler.get_remaining_requests("10.0.0.1") == 2
    assert await throttler.is_allowed("10.0.0.1")


async def test_window_expires(throttler, clock):
    await throttler.track_request("10.0.0.1")
    await throttler.track_request("10.0.0.1")
    clock.advance(61)

    assert await throttler.is_allowed("10.0.0.1")
    await throttler.track_request("10.0.0.1")
    assert await throttler.get_remaining_requests("10.0.0.1") == 1


async def test_retry_after_counts_down(throttler, clock):
    await throttler.track_request("10.0.0.1")
    await throttler.track_request("10.0.0.1")
    clock.advance(45.5)

    assert await throttler.get_reset_seconds("10.0.0.1") == 15
    with pytest.raises(ThrottlingError) as exc_info:
        await throttler.track_request("10.0.0.1")
    assert exc_info.value.retry_after == 15


async def test_identifiers_are_counted_separately(throttler):
    await throttler.track_request("10.0.0.1")
    await throttler.track_request("10.0.0.1")

    assert await throttler.get_remaining_requests("10.0.0.2") == 2
    assert await throttler.get_reset_seconds("10.0.0.2") == 0


async def test_custom_limit_overrides_default(throttler):
    strict = ThrottleLimit(ttl=10, limit=1)
    await throttler.track_request("10.0.0.1", strict)
    with pytest.raises(ThrottlingError):
        await throttler.track_request("10.0.0.1", strict)


@pytest.mark.parametrize(
    "call",
    [
        lambda t: t.is_allowed(""),
        lambda t: t.track_request(""),
        lambda t: t.get_remaining_requests(""),
        lambda t: t.get_reset_seconds(""),
        lambda t: t.reset_throttling(""),
    ],
)
async def test_empty_identifier_is_rejected(throttler, call):
    with pytest.raises(InvalidThrottleIdentifierError):
        await call(throttler)
