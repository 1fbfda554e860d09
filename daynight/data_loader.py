"""
Base map data: Natural Earth shapefiles and a generated graticule.

Everything ends up as a list of (N, 2) float32 [lon, lat] polylines, plus a
flattened form for vectorized projection.
"""

import logging
import os
os.environ['SHAPE_RESTORE_SHX'] = 'YES'

import numpy as np

log = logging.getLogger("daynight.data_loader")

GRATICULE_STEP = 30
GRATICULE_RESOLUTION = 2.0  # degrees between graticule vertices


def extract_line_segments(gdf):
    """Extract polylines from the geometries of a GeoDataFrame."""
    segments = []

    def extract_coords(geom):
        t = geom.geom_type
        if t == 'Polygon':
            segments.append(np.array(geom.exterior.coords, dtype=np.float32)[:, :2])
            for interior in geom.interiors:
                segments.append(np.array(interior.coords, dtype=np.float32)[:, :2])
        elif t == 'LineString':
            segments.append(np.array(geom.coords, dtype=np.float32)[:, :2])
        elif t in ('MultiPolygon', 'MultiLineString', 'GeometryCollection'):
            for part in geom.geoms:
                extract_coords(part)

    for geom in gdf.geometry:
        if geom is not None and not geom.is_empty:
            extract_coords(geom)

    return [s for s in segments if len(s) >= 2]


def flatten_segments(segments):
    """
    Pre-flatten polylines for fast projection.

    Returns:
        dict with:
            - all_lons, all_lats: flattened coordinate arrays
            - seg_starts: start index of each segment in the flat arrays
            - seg_lengths: length of each segment
        or None if there are no segments
    """
    if not segments:
        return None

    seg_lengths = np.array([len(s) for s in segments], dtype=np.int64)
    seg_starts = np.zeros(len(segments), dtype=np.int64)
    seg_starts[1:] = np.cumsum(seg_lengths[:-1])

    coords = np.concatenate(segments).astype(np.float64)
    return {
        'all_lons': coords[:, 0],
        'all_lats': coords[:, 1],
        'seg_starts': seg_starts,
        'seg_lengths': seg_lengths,
    }


def graticule_segments(step=GRATICULE_STEP, max_lat=80.0):
    """Meridians and parallels every `step` degrees."""
    segments = []
    lats = np.arange(-max_lat, max_lat + GRATICULE_RESOLUTION, GRATICULE_RESOLUTION)
    lats = np.clip(lats, -max_lat, max_lat)
    for lon in range(-180, 180, step):
        segments.append(np.column_stack([np.full(len(lats), lon), lats]).astype(np.float32))

    lons = np.arange(-180.0, 180.0 + GRATICULE_RESOLUTION, GRATICULE_RESOLUTION)
    for lat in range(-60, 61, step):
        segments.append(np.column_stack([lons, np.full(len(lons), lat)]).astype(np.float32))
    return segments


def load_shapefile(shapefile_path):
    """Load a shapefile's geometries as polylines. Returns [] if the file is missing."""
    if not shapefile_path or not os.path.exists(shapefile_path):
        log.warning("Shapefile not found: %s", shapefile_path)
        return []

    import geopandas as gpd
    gdf = gpd.read_file(shapefile_path)
    segments = extract_line_segments(gdf)
    del gdf
    log.info("Loaded %d segments from %s", len(segments), shapefile_path)
    return segments
