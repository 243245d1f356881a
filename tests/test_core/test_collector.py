from __future__ import annotations

from typing import Any, Dict, List

import pytest

from bundlekeeper.core.cache import ResolutionCache
from bundlekeeper.core.registry import BundleRegistry
from bundlekeeper.core.collector import CollectionResult, DependencyCollector
from bundlekeeper.models import Bundle, BundleRef, PackageRef, Project


def _bundle(name: str, *requires: str, **kwargs: Any) -> Bundle:
    return Bundle(name, kwargs.pop("version", "1.0.0"), requires=[BundleRef(r) for r in requires], **kwargs)


def _collector(projects: List[Project], bundles: List[Bundle]) -> DependencyCollector:
    return DependencyCollector(ResolutionCache(BundleRegistry(projects, bundles)))


def _names(result: CollectionResult) -> List[str]:
    return [b.name for b in result.bundles]


class CountingRegistry(BundleRegistry):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.calls: Dict[Any, int] = {}

    def resolve(self, ref: Any) -> Any:
        self.calls[ref] = self.calls.get(ref, 0) + 1
        return super().resolve(ref)


@pytest.mark.unit
class TestCollectBundles:
    """Tests for transitive bundle collection."""

    def test_collects_transitive_bundles_in_preorder(self) -> None:
        root = Project("root", requires=[BundleRef("a"), BundleRef("b")])
        collector = _collector([root], [_bundle("a", "c"), _bundle("b"), _bundle("c")])

        result = collector.collect(root)

        assert _names(result) == ["a", "c", "b"]
        assert result.projects == []

    def test_diamond_yields_shared_bundle_once(self) -> None:
        root = Project("root", requires=[BundleRef("a")])
        bundles = [_bundle("a", "b", "c"), _bundle("b", "d"), _bundle("c", "d"), _bundle("d")]

        result = _collector([root], bundles).collect(root)

        assert _names(result) == ["a", "b", "d", "c"]
        assert _names(result).count("d") == 1

    def test_cycle_terminates_without_duplicates(self) -> None:
        root = Project("root", requires=[BundleRef("a")])
        bundles = [_bundle("a", "b"), _bundle("b", "a")]

        result = _collector([root], bundles).collect(root)

        assert _names(result) == ["a", "b"]

    def test_self_requiring_bundle(self) -> None:
        root = Project("root", requires=[BundleRef("a")])

        result = _collector([root], [_bundle("a", "a")]).collect(root)

        assert _names(result) == ["a"]

    def test_missing_references_are_skipped(self) -> None:
        root = Project(
            "root",
            requires=[BundleRef("absent"), BundleRef("a")],
            imports=[PackageRef("org.nobody")],
        )

        result = _collector([root], [_bundle("a", "also.absent")]).collect(root)

        assert _names(result) == ["a"]

    def test_out_of_range_reference_is_missing(self) -> None:
        root = Project("root", requires=[BundleRef("a", "[2.0,3.0)")])

        result = _collector([root], [_bundle("a", version="1.0.0")]).collect(root)

        assert result.bundles == []

    def test_deep_chain_does_not_hit_recursion_limit(self) -> None:
        depth = 5000
        bundles = [_bundle(f"b{i}", f"b{i + 1}") for i in range(depth)]
        bundles.append(_bundle(f"b{depth}"))
        root = Project("root", requires=[BundleRef("b0")])

        result = _collector([root], bundles).collect(root)

        assert len(result.bundles) == depth + 1
        assert result.bundles[-1].name == f"b{depth}"


@pytest.mark.unit
class TestCollectProjects:
    """Tests for project classification."""

    def test_required_project_is_terminal(self) -> None:
        lib = Project("lib", requires=[BundleRef("a")])
        root = Project("root", requires=[BundleRef("lib")])

        result = _collector([lib, root], [_bundle("a")]).collect(root)

        assert result.projects == [lib]
        assert result.bundles == []

    def test_project_wins_over_bundle_of_same_name(self) -> None:
        lib = Project("lib")
        root = Project("root", requires=[BundleRef("lib")])

        result = _collector([lib, root], [_bundle("lib")]).collect(root)

        assert result.projects == [lib]
        assert result.bundles == []

    def test_root_reached_through_cycle_is_not_listed(self) -> None:
        root = Project("root", requires=[BundleRef("a")])
        collector = _collector([root], [_bundle("a", "root")])

        result = collector.collect(root)

        assert root not in result.projects
        assert _names(result) == ["a"]

    def test_root_dropped_from_longer_cycle_other_projects_kept(self) -> None:
        lib = Project("lib")
        root = Project("root", requires=[BundleRef("a")])
        bundles = [_bundle("a", "b"), _bundle("b", "root", "lib")]

        result = _collector([lib, root], bundles).collect(root)

        assert result.projects == [lib]
        assert _names(result) == ["a", "b"]

    def test_without_excludes_given_project(self) -> None:
        lib = Project("lib")
        root = Project("root", requires=[BundleRef("lib"), BundleRef("a")])

        result = _collector([lib, root], [_bundle("a")]).collect(root)

        assert result.without(lib).projects == []
        assert _names(result.without(lib)) == ["a"]

    def test_projects_listed_once(self) -> None:
        lib = Project("lib", exports=["org.lib"])
        root = Project("root", requires=[BundleRef("lib")], imports=[PackageRef("org.lib")])

        result = _collector([lib, root], []).collect(root)

        assert result.projects == [lib]


@pytest.mark.unit
class TestCollectPackagesAndFragments:
    """Tests for package providers and fragment attachment."""

    def test_package_reference_pulls_every_provider(self) -> None:
        lib = Project("lib", exports=["org.api"])
        root = Project("root", imports=[PackageRef("org.api")])
        bundles = [
            _bundle("impl.one", exports=["org.api"]),
            _bundle("impl.two", "dep", exports=["org.api"]),
            _bundle("dep"),
        ]

        result = _collector([lib, root], bundles).collect(root)

        assert _names(result) == ["impl.one", "impl.two", "dep"]
        assert result.projects == [lib]

    def test_fragments_accompany_their_host(self) -> None:
        host = _bundle("host")
        fragment = _bundle("host.nl", fragment_host=BundleRef("host"))
        root = Project("root", requires=[BundleRef("host")])

        result = _collector([root], [host, fragment]).collect(root)

        assert _names(result) == ["host", "host.nl"]

    def test_fragment_dependencies_are_not_expanded(self) -> None:
        host = _bundle("host")
        fragment = _bundle("host.nl", "extra", fragment_host=BundleRef("host"))
        root = Project("root", requires=[BundleRef("host")])

        result = _collector([root], [host, fragment, _bundle("extra")]).collect(root)

        assert "extra" not in _names(result)


@pytest.mark.unit
class TestCollectorState:
    """Tests for per-call state and cache sharing."""

    def test_each_call_starts_fresh(self) -> None:
        first = Project("first", requires=[BundleRef("a")])
        second = Project("second", requires=[BundleRef("b")])
        collector = _collector([first, second], [_bundle("a"), _bundle("b")])

        collector.collect(first)
        result = collector.collect(second)

        assert _names(result) == ["b"]

    def test_repeated_collection_is_stable(self) -> None:
        root = Project("root", requires=[BundleRef("a")])
        collector = _collector([root], [_bundle("a", "b"), _bundle("b")])

        assert collector.collect(root) == collector.collect(root)

    def test_each_reference_resolved_once_across_collections(self) -> None:
        first = Project("first", requires=[BundleRef("a")])
        second = Project("second", requires=[BundleRef("a"), BundleRef("b")])
        registry = CountingRegistry([first, second], [_bundle("a", "b"), _bundle("b")])
        collector = DependencyCollector(ResolutionCache(registry))

        collector.collect(first)
        collector.collect(second)

        assert registry.calls == {BundleRef("a"): 1, BundleRef("b"): 1}

    def test_collect_all_is_sorted_union(self) -> None:
        first = Project("first", requires=[BundleRef("zeta"), BundleRef("alpha")])
        second = Project("second", requires=[BundleRef("alpha"), BundleRef("mid")])
        collector = _collector(
            [first, second], [_bundle("zeta"), _bundle("alpha"), _bundle("mid")]
        )

        bundles = collector.collect_all([first, second])

        assert [b.name for b in bundles] == ["alpha", "mid", "zeta"]


@pytest.mark.unit
class TestCollectionResult:
    """Tests for CollectionResult helpers."""

    def test_coordinates_and_names_sorted(self) -> None:
        result = CollectionResult(
            bundles=[_bundle("b"), _bundle("a")],
            projects=[Project("z"), Project("m")],
        )

        assert result.bundle_coordinates() == ["osgi:a:jar:1.0.0", "osgi:b:jar:1.0.0"]
        assert result.project_names() == ["m", "z"]
