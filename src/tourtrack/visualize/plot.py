# tourtrack/visualize/plot.py
"""
Plotting routines for TourTrack
"""

import matplotlib.pyplot as plt


def plot_elevation_profile(enriched, *, show=False):
    distances_km = [p.cumulative_distance_m / 1000 for p in enriched]
    elevations = [p.elevation_m for p in enriched]

    fig, ax = plt.subplots(figsize=(8, 4))
    ax.fill_between(distances_km, elevations, alpha=0.3)
    ax.plot(distances_km, elevations)
    ax.set_xlabel("Distance (km)")
    ax.set_ylabel("Elevation (m)")
    ax.set_title("Elevation profile")
    if show:
        plt.show()
    return fig


def plot_speed(enriched, *, show=False):
    lats = [p.latitude for p in enriched]
    lons = [p.longitude for p in enriched]
    speeds = [p.speed_kmh for p in enriched]

    fig, ax = plt.subplots(figsize=(8, 6))
    sc = ax.scatter(lons, lats, c=speeds, s=5, cmap="viridis")
    fig.colorbar(sc, ax=ax, label="Speed (km/h)")
    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.set_title("Track coloured by speed")
    if show:
        plt.show()
    return fig
