"""EmerCare directory: donors, hospitals, ambulance services and proximity search."""
