"""Tests for base map data loading."""

import geopandas as gpd
import numpy as np

from daynight.data_loader import (
    extract_line_segments,
    flatten_segments,
    graticule_segments,
    load_shapefile,
)


def _frame(*wkt):
    return gpd.GeoDataFrame(geometry=gpd.GeoSeries.from_wkt(list(wkt)))


class TestExtractLineSegments:

    def test_polygon_with_hole(self):
        gdf = _frame("POLYGON ((0 0, 10 0, 10 10, 0 10, 0 0), (2 2, 4 2, 4 4, 2 2))")
        segments = extract_line_segments(gdf)
        assert len(segments) == 2
        assert segments[0].shape == (5, 2)
        assert segments[0].dtype == np.float32

    def test_multi_geometries(self):
        gdf = _frame(
            "MULTILINESTRING ((0 0, 1 1), (2 2, 3 3, 4 4))",
            "MULTIPOLYGON (((0 0, 1 0, 1 1, 0 0)), ((5 5, 6 5, 6 6, 5 5)))",
            "LINESTRING (-10 -10, 10 10)",
        )
        assert len(extract_line_segments(gdf)) == 5

    def test_points_are_skipped(self):
        assert extract_line_segments(_frame("POINT (1 2)")) == []


class TestFlattenSegments:

    def test_empty(self):
        assert flatten_segments([]) is None

    def test_offsets(self):
        segments = [np.zeros((3, 2), dtype=np.float32), np.ones((4, 2), dtype=np.float32)]
        flat = flatten_segments(segments)
        assert list(flat['seg_starts']) == [0, 3]
        assert list(flat['seg_lengths']) == [3, 4]
        assert len(flat['all_lons']) == 7
        assert flat['all_lats'][3] == 1.0


class TestGraticule:

    def test_lines(self):
        segments = graticule_segments(step=30)
        # 12 meridians and the parallels at -60..60
        assert len(segments) == 12 + 5
        assert all(np.all(np.abs(s[:, 1]) <= 80.0) for s in segments)


class TestLoadShapefile:

    def test_missing_file(self, tmp_path):
        assert load_shapefile(str(tmp_path / "nope.shp")) == []

    def test_reads_shapefile(self, tmp_path):
        path = tmp_path / "lines.shp"
        gdf = _frame("LINESTRING (0 0, 10 10, 20 0)", "LINESTRING (-30 5, -20 5)")
        gdf = gdf.set_crs("EPSG:4326")
        gdf.to_file(path)
        segments = load_shapefile(str(path))
        assert len(segments) == 2
        assert sorted(len(s) for s in segments) == [2, 3]
