from app.utils.region import extract_region_from_address
from app.utils.time import as_utc, current_time_slot, utc_now

__all__ = ["as_utc", "current_time_slot", "extract_region_from_address", "utc_now"]
