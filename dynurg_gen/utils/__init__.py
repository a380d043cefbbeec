# dynurg_gen/utils/__init__.py
from .geometry import (
    Rect, euclidean, nearest_distance, square_area, area_center, sample_uniform_rect,
)
from .timing import (
    TravelTimes, ms_from_distance, round_half_up, round_half_down,
)
from .seeding import derive_seed, next_seed
from .metrics import (
    UrgencySummary,
    check_time_window_strictness,
    measure_urgency,
    measure_dynamism,
    get_event_type_counts,
    count_parcels,
    get_service_points,
    get_arrival_times,
)
