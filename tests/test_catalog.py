"""Tests for the category catalog."""

import pytest

from storagemeter.catalog import TOTAL, CategoryCatalog, catalog_from_layout
from storagemeter.errors import ConfigurationError
from storagemeter.models import AppLayout, Category


def make_catalog(**paths) -> CategoryCatalog:
    """Helper to build a catalog from name=[paths] keywords."""
    return CategoryCatalog([Category(name=name, paths=p) for name, p in paths.items()])


class TestCategoryCatalog:
    def test_names_and_paths(self):
        catalog = make_catalog(assets=["/app/uploads"], total=["/app"])
        assert catalog.names() == {"assets", "total"}
        assert catalog.paths("assets") == ["/app/uploads"]
        assert len(catalog) == 2
        assert "assets" in catalog

    def test_paths_keep_order(self):
        catalog = make_catalog(cache=["/b", "/a", "/c"])
        assert catalog.paths("cache") == ["/b", "/a", "/c"]

    def test_categories_cannot_be_mutated_through_get(self):
        catalog = make_catalog(assets=["/app/a"], total=["/app"])
        assets = catalog.get("assets")
        total = catalog.get(TOTAL)

        assert assets.paths == ("/app/a",)
        assert total.encloses == ("assets",)
        with pytest.raises(AttributeError):
            assets.paths.append("/etc")
        with pytest.raises(AttributeError):
            total.encloses.append("ghost")
        assert catalog.paths("assets") == ["/app/a"]
        assert catalog.top_level() == ["assets"]

    def test_unknown_category(self):
        catalog = make_catalog(assets=["/a"])
        assert catalog.get("nope") is None
        with pytest.raises(KeyError):
            catalog.paths("nope")

    def test_total_encloses_all_others_by_default(self):
        catalog = make_catalog(assets=["/app/a"], cache=["/app/c"], total=["/app"])
        assert catalog.total_name == TOTAL
        assert set(catalog.enclosed_by(TOTAL)) == {"assets", "cache"}

    def test_no_total(self):
        catalog = make_catalog(assets=["/a"])
        assert catalog.total_name is None
        assert catalog.top_level() == []

    def test_custom_total_name(self):
        catalog = CategoryCatalog(
            [Category(name="a", paths=["/r/a"]), Category(name="everything", paths=["/r"])],
            total="everything",
        )
        assert catalog.total_name == "everything"
        assert catalog.enclosed_by("everything") == ["a"]

    def test_zero_paths_allowed(self):
        catalog = make_catalog(empty=[])
        assert catalog.paths("empty") == []

    def test_duplicate_names_rejected(self):
        with pytest.raises(ConfigurationError):
            CategoryCatalog([Category(name="a", paths=["/a"]), Category(name="a", paths=["/b"])])

    def test_empty_path_rejected(self):
        with pytest.raises(ConfigurationError):
            make_catalog(assets=[""])

    def test_undefined_enclosed_category_rejected(self):
        with pytest.raises(ConfigurationError):
            CategoryCatalog([Category(name="total", paths=["/"], encloses=["ghost"])])

    def test_self_containment_rejected(self):
        with pytest.raises(ConfigurationError):
            CategoryCatalog([Category(name="a", paths=["/a"], encloses=["a"])])

    def test_cycle_rejected(self):
        with pytest.raises(ConfigurationError):
            CategoryCatalog(
                [
                    Category(name="a", paths=["/a"], encloses=["b"]),
                    Category(name="b", paths=["/b"], encloses=["a"]),
                ]
            )

    def test_top_level_skips_nested_categories(self):
        catalog = CategoryCatalog(
            [
                Category(name="plugins", paths=["/app/plugins"], encloses=["themes"]),
                Category(name="themes", paths=["/app/plugins/themes"]),
                Category(name="assets", paths=["/app/assets"]),
                Category(name="total", paths=["/app"]),
            ]
        )
        assert sorted(catalog.top_level()) == ["assets", "plugins"]

    def test_overlapping_paths_detected(self):
        catalog = make_catalog(
            cache=["/app/build"], plugins=["/app/build/plugins"], assets=["/app/assets"],
            total=["/app"],
        )
        assert catalog.overlapping_paths() == [("cache", "plugins")]

    def test_declared_containment_is_not_overlap(self):
        catalog = CategoryCatalog(
            [
                Category(name="plugins", paths=["/app/plugins"], encloses=["themes"]),
                Category(name="themes", paths=["/app/plugins/themes"]),
                Category(name="total", paths=["/app"]),
            ]
        )
        assert catalog.overlapping_paths() == []

    def test_sibling_prefix_is_not_overlap(self):
        catalog = make_catalog(a=["/app/data"], b=["/app/database"])
        assert catalog.overlapping_paths() == []


class TestCatalogFromLayout:
    def test_standard_categories(self):
        layout = AppLayout(
            upload_dir="/app/uploads",
            upload_temp_dir="/app/tmp",
            build_dir="/app/builds",
            framework_dir="/app/framework",
            plugin_install_dir="/app/plugins",
        )
        catalog = catalog_from_layout(layout, "/app")

        assert catalog.names() == {"assets", "cache", "plugins", "total"}
        assert catalog.paths("assets") == ["/app/uploads"]
        assert catalog.paths("cache") == ["/app/tmp", "/app/builds"]
        assert catalog.paths("plugins") == [
            "/app/framework/src/components",
            "/app/framework/src/extensions",
            "/app/framework/src/menu",
            "/app/framework/src/theme",
            "/app/plugins",
        ]
        assert catalog.paths("total") == ["/app"]
        assert catalog.total_name == "total"
        assert catalog.overlapping_paths() == []
