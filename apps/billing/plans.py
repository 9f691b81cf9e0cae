"""Room plans sold through hosted checkout.

``plan_type`` matches ``Room.plan_type`` and the ``planType`` metadata key
on the provider's product; ``max_rooms`` is the concurrent-room entitlement
advertised for the plan.
"""
from apps.rooms.models import Room

PLANS = [
    {
        'plan_type': Room.PLAN_BASIC,
        'name': 'Basic Room',
        'description': 'For quick, simple deals. 1 active room.',
        'price': 900,
        'max_rooms': 1,
    },
    {
        'plan_type': Room.PLAN_STANDARD,
        'name': 'Standard Room',
        'description': 'For serious deals where structure is needed. 2 active rooms.',
        'price': 1900,
        'max_rooms': 2,
    },
    {
        'plan_type': Room.PLAN_PRO,
        'name': 'Pro Room',
        'description': 'For higher value deals. 5 active rooms with export.',
        'price': 2900,
        'max_rooms': 5,
    },
]


def get_plan(plan_type):
    for plan in PLANS:
        if plan['plan_type'] == plan_type:
            return plan
    raise KeyError(plan_type)
