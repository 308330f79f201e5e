import numpy as np
import pandas as pd


def generate_mock_trace(
        start=(37.4979, 127.0276),
        goal=(37.5045, 127.0490),
        num_fixes=240,
        interval_s=1.0,
        speed_mps=1.4,
        excursion=(90, 110),
        output_file="mock_trace.csv",
):
    """
    Generates a walking GPS trace from start towards goal with realistic fix noise.
    Between the two excursion indices the walker drifts ~80 m north of the straight
    line, which is enough for the tracker to confirm an off-route and reroute.
    """
    # Around Gangnam station by default
    lat0, lon0 = start
    lat1, lon1 = goal

    # ~111 km per degree of latitude, scaled by cos(lat) for longitude
    m_per_deg_lat = 111_195.0
    m_per_deg_lon = m_per_deg_lat * np.cos(np.radians(lat0))

    dx = (lon1 - lon0) * m_per_deg_lon
    dy = (lat1 - lat0) * m_per_deg_lat
    total_m = float(np.hypot(dx, dy))
    heading = float((np.degrees(np.arctan2(dx, dy)) + 360.0) % 360.0)

    rows = []
    for i in range(num_fixes):
        walked = min(i * interval_s * speed_mps, total_m)
        ratio = walked / total_m if total_m > 0 else 1.0
        lat = lat0 + (lat1 - lat0) * ratio
        lon = lon0 + (lon1 - lon0) * ratio

        # 1. Off-route excursion
        if excursion[0] <= i < excursion[1]:
            lat += 80.0 / m_per_deg_lat

        # 2. GPS noise (~3 m)
        lat += np.random.normal(0.0, 3.0) / m_per_deg_lat
        lon += np.random.normal(0.0, 3.0) / m_per_deg_lon

        rows.append({
            "timestamp_ms": int(i * interval_s * 1000),
            "lat": np.round(lat, 7),
            "lon": np.round(lon, 7),
            # Compass readings only arrive some of the time
            "heading": np.round(heading + np.random.normal(0.0, 5.0), 1) if np.random.random() < 0.5 else None,
        })

    df = pd.DataFrame(rows)
    df.to_csv(output_file, index=False)
    print(f"✅ Generated {num_fixes} fixes ({total_m:.0f} m straight-line trip) and saved to '{output_file}'")
    print(f"   Off-route excursion between fix {excursion[0]} and {excursion[1]}")


if __name__ == "__main__":
    generate_mock_trace()
