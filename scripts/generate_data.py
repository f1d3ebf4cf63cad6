"""
Reference Network Data Generator
================================
Writes the reference network for the HPV vaccine planning scenario: one
product with US/EU demand, three fill/finish plants, two distribution
centers and five plant→DC lanes. All numbers are synthetic.

Transport modes are NOT written here: they are a fixed table in
planner/network.py.

Produces 4 CSV files in the data/ directory.

Usage: python scripts/generate_data.py
"""

import os
import pandas as pd

OUTPUT_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")
os.makedirs(OUTPUT_DIR, exist_ok=True)

# ═══════════════════════════════════════════════════════════════════════════════
# REFERENCE DATA
# ═══════════════════════════════════════════════════════════════════════════════

# ── Products (long format: one row per product/region) ───────────────────────
PRODUCTS = [
    {"product_id": "HPV_Gardasil9", "product_name": "HPV Vaccine (Gardasil 9)", "unit": "doses", "region": "US", "monthly_demand": 120000},
    {"product_id": "HPV_Gardasil9", "product_name": "HPV Vaccine (Gardasil 9)", "unit": "doses", "region": "EU", "monthly_demand": 80000},
]

# ── Plants ───────────────────────────────────────────────────────────────────
# capacity in units/month; uptime is the fraction of scheduled time available.
PLANTS = [
    {"plant_id": "WEST_POINT_PA", "plant_name": "West Point, PA - FF & Packaging", "region": "US", "capacity": 180000, "conversion_cost": 3.6, "uptime": 0.97, "base_risk": 0.015},
    {"plant_id": "DURHAM_NC",     "plant_name": "Durham, NC - Vaccine FF (new)",   "region": "US", "capacity": 150000, "conversion_cost": 3.9, "uptime": 0.95, "base_risk": 0.018},
    {"plant_id": "CMO_EU",        "plant_name": "EU CMO - Vaccine FF (contract)",  "region": "EU", "capacity": 70000,  "conversion_cost": 4.5, "uptime": 0.92, "base_risk": 0.024},
]

# ── Distribution centers ─────────────────────────────────────────────────────
DCS = [
    {"dc_id": "US_DC_WP",  "dc_name": "US DC - West Point, PA",        "region": "US"},
    {"dc_id": "EU_DC_HEI", "dc_name": "EU DC - Heist-op-den-Berg, BE", "region": "EU"},
]

# ── Lanes ────────────────────────────────────────────────────────────────────
# CMO_EU has no lane into the US DC and DURHAM_NC/WEST_POINT_PA reach the EU
# DC only over long lanes.
LANES = [
    {"plant_id": "WEST_POINT_PA", "dc_id": "US_DC_WP",  "distance": 50},
    {"plant_id": "DURHAM_NC",     "dc_id": "US_DC_WP",  "distance": 700},
    {"plant_id": "CMO_EU",        "dc_id": "EU_DC_HEI", "distance": 300},
    {"plant_id": "WEST_POINT_PA", "dc_id": "EU_DC_HEI", "distance": 6200},
    {"plant_id": "DURHAM_NC",     "dc_id": "EU_DC_HEI", "distance": 6600},
]


def validate_data():
    """Cross-check references before writing."""
    plant_ids = {p["plant_id"] for p in PLANTS}
    dc_ids = {d["dc_id"] for d in DCS}
    dc_regions = {d["region"] for d in DCS}
    for lane in LANES:
        assert lane["plant_id"] in plant_ids, f"Lane from unknown plant {lane['plant_id']}"
        assert lane["dc_id"] in dc_ids, f"Lane to unknown DC {lane['dc_id']}"
        assert lane["distance"] > 0, f"Lane {lane['plant_id']}->{lane['dc_id']} has no distance"
    for row in PRODUCTS:
        assert row["region"] in dc_regions, f"No DC serves demand region {row['region']}"
        assert row["monthly_demand"] >= 0
    for p in PLANTS:
        assert 0 <= p["uptime"] <= 1, f"{p['plant_id']} uptime out of range"


def write_csv(data, filename, columns):
    """Write list of dicts to CSV."""
    df = pd.DataFrame(data)[columns]
    path = os.path.join(OUTPUT_DIR, filename)
    df.to_csv(path, index=False)
    print(f"  {filename:<20s} {len(df):>4,} rows")
    return df


# ═══════════════════════════════════════════════════════════════════════════════
# MAIN
# ═══════════════════════════════════════════════════════════════════════════════

def main():
    print("Reference Network Data Generator")
    print("=" * 40)
    print(f"Output directory: {OUTPUT_DIR}")

    validate_data()

    print("\nWriting CSV files...")
    write_csv(PRODUCTS, "products.csv",
              ["product_id", "product_name", "unit", "region", "monthly_demand"])
    write_csv(PLANTS, "plants.csv",
              ["plant_id", "plant_name", "region", "capacity", "conversion_cost", "uptime", "base_risk"])
    write_csv(DCS, "dcs.csv", ["dc_id", "dc_name", "region"])
    write_csv(LANES, "lanes.csv", ["plant_id", "dc_id", "distance"])

    print("\nDone!")


if __name__ == "__main__":
    main()
