"""Unit tests for installed-state probing."""

import pytest
from craftbrew.core.errors import ProbeError
from craftbrew.core.prober import StateProber, require_kinds
from craftbrew.models.package import PackageKind
from craftbrew.models.state import ActualState
from fakes import FakeClient, cask, formula, store_app, tap


class TestStateProber:
    """Tests for StateProber.probe."""

    def test_probe_combines_kinds(self) -> None:
        """Every supported kind is listed and merged."""
        client = FakeClient(installed={formula("git"), cask("firefox"), tap("user/tools")})

        actual = StateProber(client).probe()

        assert actual.packages == frozenset({formula("git"), cask("firefox"), tap("user/tools")})
        assert actual.kinds == frozenset(PackageKind)
        assert actual.probed_at

    def test_lists_in_kind_order(self) -> None:
        """Kinds are listed taps first."""
        client = FakeClient()

        StateProber(client).probe()

        assert client.list_calls == [
            PackageKind.TAP,
            PackageKind.FORMULA,
            PackageKind.CASK,
            PackageKind.STORE_APP,
        ]

    def test_unsupported_kinds_not_listed(self) -> None:
        """Kinds the client cannot list are left out."""
        client = FakeClient(kinds=frozenset({PackageKind.FORMULA}))

        actual = StateProber(client).probe()

        assert client.list_calls == [PackageKind.FORMULA]
        assert actual.kinds == frozenset({PackageKind.FORMULA})

    def test_unavailable_client(self) -> None:
        """A missing package manager aborts with a hint."""
        client = FakeClient(available=False)

        with pytest.raises(ProbeError, match="FakeBrew is not available") as exc_info:
            StateProber(client).probe()

        assert "brew.sh" in (exc_info.value.hint or "")
        assert client.list_calls == []

    def test_listing_error_propagates(self) -> None:
        """A failing listing aborts the probe."""
        client = FakeClient()
        client.locked = True

        with pytest.raises(ProbeError, match="locked") as exc_info:
            StateProber(client).probe()

        assert exc_info.value.retryable

    def test_count_by_kind(self) -> None:
        """count_by_kind includes probed kinds with zero packages."""
        client = FakeClient(
            installed={formula("git"), store_app("Xcode", 1)},
            kinds=frozenset({PackageKind.FORMULA, PackageKind.CASK, PackageKind.STORE_APP}),
        )

        counts = StateProber(client).probe().count_by_kind()

        assert counts == {
            PackageKind.CASK: 0,
            PackageKind.FORMULA: 1,
            PackageKind.STORE_APP: 1,
        }


class TestRequireKinds:
    """Tests for require_kinds function."""

    def test_all_present(self) -> None:
        """No error when every declared kind was probed."""
        actual = ActualState(packages=frozenset(), kinds=frozenset(PackageKind))

        require_kinds(actual, [PackageKind.FORMULA, PackageKind.STORE_APP])

    def test_missing_store_app(self) -> None:
        """Declared store apps without mas fail with an install hint."""
        actual = ActualState(
            packages=frozenset(),
            kinds=frozenset({PackageKind.FORMULA, PackageKind.CASK, PackageKind.TAP}),
        )

        with pytest.raises(ProbeError, match="Cannot read installed StoreApp") as exc_info:
            require_kinds(actual, [PackageKind.STORE_APP])

        assert exc_info.value.hint == "Install the App Store CLI with: brew install mas"
