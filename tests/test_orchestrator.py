import pytest

from roast_lens.errors import (
    ConfigurationError,
    FallbackReason,
    NotFound,
    RateLimited,
    ResolutionEmpty,
    UpstreamFailure,
)
from roast_lens.models import ProfileQuery, ProfileRecord, Source
from roast_lens.orchestrator import (
    Failed,
    FallbackOnly,
    Resolved,
    TryPrimary,
    build_sources,
    initial_state,
    resolve_profile,
    step,
)
from roast_lens.platforms.base import SourceResult
from roast_lens.platforms.search.fetcher import SearchSource
from roast_lens.platforms.x.fetcher import XSource

pytestmark = pytest.mark.asyncio

FALLBACK_PROFILE = ProfileRecord(
    id="test_user",
    display_name="Test User",
    username="test_user",
    followers=500,
    following=50,
    origin_source=Source.FALLBACK,
)


class FakeSource:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls: list[str] = []

    async def fetch(self, handle):
        self.calls.append(handle)
        if self.error is not None:
            raise self.error
        return self.result


async def test_primary_success_resolves(primary_profile, recent_post):
    primary = FakeSource(SourceResult(primary_profile, recent_post))
    fallback = FakeSource(SourceResult(FALLBACK_PROFILE))
    state = await resolve_profile(ProfileQuery(handle="@Test_User"), primary, fallback)

    assert isinstance(state, Resolved)
    assert state.profile.origin_source == Source.PRIMARY
    assert state.post == recent_post
    assert primary.calls == ["test_user"]
    assert fallback.calls == []


async def test_rate_limit_escalates_exactly_once():
    primary = FakeSource(error=RateLimited())
    fallback = FakeSource(SourceResult(FALLBACK_PROFILE))
    state = await resolve_profile(ProfileQuery(handle="test_user"), primary, fallback)

    assert isinstance(state, Resolved)
    assert state.profile.origin_source == Source.FALLBACK
    assert state.post is None
    assert len(primary.calls) == 1
    assert len(fallback.calls) == 1


async def test_rate_limit_with_empty_fallback_fails_once():
    primary = FakeSource(error=RateLimited())
    fallback = FakeSource(None)
    state = await resolve_profile(ProfileQuery(handle="test_user"), primary, fallback)

    assert isinstance(state, Failed)
    assert isinstance(state.error, ResolutionEmpty)
    assert state.error.reason is FallbackReason.RATE_LIMITED
    assert "rate-limiting" in state.error.user_message
    assert len(primary.calls) == 1
    assert len(fallback.calls) == 1


async def test_forced_fallback_never_touches_primary(primary_profile):
    primary = FakeSource(SourceResult(primary_profile))
    fallback = FakeSource(SourceResult(FALLBACK_PROFILE))
    query = ProfileQuery(handle="test_user", source_preference=Source.FALLBACK)
    state = await resolve_profile(query, primary, fallback)

    assert isinstance(state, Resolved)
    assert state.profile.origin_source == Source.FALLBACK
    assert primary.calls == []


async def test_forced_fallback_failure_message_differs_from_escalation():
    query = ProfileQuery(handle="test_user", source_preference=Source.FALLBACK)
    forced = await resolve_profile(query, None, FakeSource(None))
    escalated = await resolve_profile(ProfileQuery(handle="test_user"), FakeSource(error=RateLimited()), FakeSource(None))

    assert forced.error.reason is FallbackReason.FORCED
    assert forced.error.user_message != escalated.error.user_message


@pytest.mark.parametrize("error", [NotFound(), UpstreamFailure("X API error: boom")])
async def test_definitive_primary_errors_do_not_fall_back(error):
    primary = FakeSource(error=error)
    fallback = FakeSource(SourceResult(FALLBACK_PROFILE))
    state = await resolve_profile(ProfileQuery(handle="test_user"), primary, fallback)

    assert isinstance(state, Failed)
    assert state.error is error
    assert fallback.calls == []


async def test_missing_primary_is_configuration_error():
    fallback = FakeSource(SourceResult(FALLBACK_PROFILE))
    state = await resolve_profile(ProfileQuery(handle="test_user"), None, fallback)

    assert isinstance(state, Failed)
    assert isinstance(state.error, ConfigurationError)
    assert "X_BEARER_TOKEN" in state.error.user_message
    assert fallback.calls == []


async def test_fallback_post_is_dropped(primary_profile, recent_post):
    fallback = FakeSource(SourceResult(FALLBACK_PROFILE, recent_post))
    state = await step(FallbackOnly(FallbackReason.FORCED), "test_user", None, fallback)
    assert state.post is None


async def test_terminal_states_are_fixed_points(primary_profile):
    resolved = Resolved(primary_profile)
    failed = Failed(NotFound())
    assert await step(resolved, "x", None, None) is resolved
    assert await step(failed, "x", None, None) is failed


async def test_initial_state_follows_preference():
    assert initial_state(ProfileQuery(handle="a")) == TryPrimary()
    assert initial_state(ProfileQuery(handle="a", source_preference=Source.FALLBACK)) == FallbackOnly(
        FallbackReason.FORCED
    )


async def test_build_sources(make_settings):
    primary, fallback = build_sources(make_settings())
    assert primary is None
    assert isinstance(fallback, SearchSource)
    assert not fallback.configured

    primary, fallback = build_sources(
        make_settings(x_bearer_token="t", perplexity_api_key="p", openai_api_key="o")
    )
    assert isinstance(primary, XSource)
    assert fallback.configured


async def test_primary_without_result_is_not_found():
    state = await resolve_profile(ProfileQuery(handle="test_user"), FakeSource(None), FakeSource(None))
    assert isinstance(state, Failed)
    assert isinstance(state.error, NotFound)


async def test_unexpected_primary_crash_becomes_upstream_failure():
    fallback = FakeSource(SourceResult(FALLBACK_PROFILE))
    state = await resolve_profile(
        ProfileQuery(handle="test_user"), FakeSource(error=AttributeError("boom")), fallback
    )
    assert isinstance(state, Failed)
    assert isinstance(state.error, UpstreamFailure)
    assert fallback.calls == []
