# Business logic services
from dinnerlog.services.advisor import (
    RepeatServingAdvisor,
    ServingRecord,
    RepeatAlert,
    DishServingSummary,
    AdvisorError,
    InvalidArgument,
    UpstreamUnavailable,
)
from dinnerlog.services.serving_records import fetch_serving_records
from dinnerlog.services.history import guest_meal_history, dish_history

__all__ = [
    'RepeatServingAdvisor',
    'ServingRecord',
    'RepeatAlert',
    'DishServingSummary',
    'AdvisorError',
    'InvalidArgument',
    'UpstreamUnavailable',
    'fetch_serving_records',
    'guest_meal_history',
    'dish_history',
]
